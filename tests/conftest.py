# tests/conftest.py
import pytest

from offer_tracker.db import make_engine, make_session_factory
from offer_tracker.notifier import Notifier
from offer_tracker.poller import Poller
from offer_tracker.schemas import Listing
from offer_tracker.services import TrackerService
from offer_tracker.store import SqlSnapshotBackend, TrackerStore


class FakeMarketplace:
    """Search results keyed by term; an Exception value is raised instead."""

    def __init__(self):
        self.results = {}
        self.calls = []
        self.before_return = None

    def search(self, term, min_price=0, max_price=0, condition=None, region_id=None):
        self.calls.append({
            "term": term,
            "min_price": min_price,
            "max_price": max_price,
            "condition": condition,
            "region_id": region_id,
        })
        result = self.results.get(term, [])
        if isinstance(result, Exception):
            raise result
        if self.before_return:
            self.before_return(term)
        return iter([Listing.model_validate(item) for item in result])


class FakeResolver:
    def __init__(self, regions=None):
        self.regions = regions or {}
        self.calls = []
        self.error = None

    def resolve(self, code):
        self.calls.append(code)
        if self.error:
            raise self.error
        return self.regions.get(code)


class RecordingChannel:
    def __init__(self):
        self.sent = []
        self.error = None

    def send(self, address, message):
        if self.error:
            raise self.error
        self.sent.append((address, message))


@pytest.fixture
def engine():
    return make_engine("sqlite://")


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def backend(engine, session_factory):
    return SqlSnapshotBackend(engine, session_factory)


@pytest.fixture
def store(backend):
    s = TrackerStore(backend)
    s.load()
    return s


@pytest.fixture
def marketplace():
    return FakeMarketplace()


@pytest.fixture
def resolver():
    return FakeResolver({"SP": "BR-SP"})


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def notifier(channel):
    return Notifier(channel)


@pytest.fixture
def poller(store, resolver, marketplace, notifier):
    return Poller(store, resolver, marketplace, notifier)


@pytest.fixture
def service(store, notifier, poller):
    return TrackerService(store, notifier, poller)


@pytest.fixture
def code_of(store):
    def _code(tracker_id):
        return store.get_tracker(tracker_id).confirmation_code
    return _code


@pytest.fixture
def active_tracker(service, code_of):
    def _make(term, **kwargs):
        kwargs.setdefault("notify_address", "(11) 90000-0000")
        tracker = service.create(term, **kwargs)
        return service.confirm(tracker.id, code_of(tracker.id))
    return _make

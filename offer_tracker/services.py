# offer_tracker/services.py
"""Tracker lifecycle: PENDING --confirm--> ACTIVE, delete from either state.

A PENDING tracker always carries exactly one confirmation code and an
ACTIVE tracker never carries one.
"""
import secrets
import uuid
from typing import List

from . import errors
from .notifier import code_message
from .schemas import Condition, Product, Tracker, TrackerOut, TrackerStatus
from .utils import logger, utcnow


def generate_code() -> str:
    """Four random decimal digits, 1000-9999."""
    return str(1000 + secrets.randbelow(9000))


class TrackerService:
    def __init__(self, store, notifier, poller=None):
        self.store = store
        self.notifier = notifier
        self.poller = poller

    def list_trackers(self) -> List[TrackerOut]:
        return [t.public() for t in self.store.list_trackers()]

    def list_products(self) -> List[Product]:
        return self.store.list_products()

    def create(self, search_term: str, min_price: float = 0, max_price: float = 0,
               condition: Condition = Condition.ALL, location: str = "",
               notify_address: str = "") -> TrackerOut:
        search_term = (search_term or "").strip()
        notify_address = (notify_address or "").strip()
        if not search_term or not notify_address:
            raise errors.ValidationError("Search term and notification address are required.")
        tracker = Tracker(
            id=str(uuid.uuid4()),
            search_term=search_term,
            min_price=min_price or 0,
            max_price=max_price or 0,
            condition=condition or Condition.ALL,
            location=(location or "").strip(),
            notify_address=notify_address,
            created_at=utcnow(),
            status=TrackerStatus.PENDING,
            confirmation_code=generate_code(),
        )
        with self.store.mutate() as state:
            state.trackers.insert(0, tracker)
            out = tracker.public()
            code = tracker.confirmation_code
        logger.info("Tracker created id=%s term=%r", out.id, out.search_term)
        self.notifier.notify(out.notify_address, code_message(out, code))
        return out

    def confirm(self, tracker_id: str, code: str) -> TrackerOut:
        with self.store.mutate() as state:
            tracker = state.find_tracker(tracker_id)
            if tracker is None:
                raise errors.NotFoundError("Tracker not found.")
            if tracker.status == TrackerStatus.ACTIVE:
                raise errors.AlreadyActiveError("This tracker is already active.")
            if not code or tracker.confirmation_code != str(code):
                raise errors.InvalidCodeError("Invalid confirmation code.")
            tracker.status = TrackerStatus.ACTIVE
            tracker.confirmation_code = None
            activated = tracker.model_copy(deep=True)
        logger.info("Tracker activated id=%s term=%r", activated.id, activated.search_term)
        if self.poller is not None:
            # first results without waiting for the next scheduled tick
            self.poller.poll_tracker(activated)
        return activated.public()

    def resend_code(self, tracker_id: str):
        with self.store.mutate() as state:
            tracker = state.find_tracker(tracker_id)
            if tracker is None:
                raise errors.NotFoundError("Tracker not found.")
            if tracker.status != TrackerStatus.PENDING:
                raise errors.NotPendingError("This tracker is not pending.")
            tracker.confirmation_code = generate_code()
            pending = tracker.model_copy(deep=True)
        logger.info("Confirmation code reissued id=%s", pending.id)
        self.notifier.notify(pending.notify_address, code_message(pending, pending.confirmation_code, resent=True))

    def delete(self, tracker_id: str):
        with self.store.mutate() as state:
            tracker = state.find_tracker(tracker_id)
            if tracker is None:
                raise errors.NotFoundError("Tracker not found.")
            state.trackers.remove(tracker)
        logger.info("Tracker deleted id=%s", tracker_id)

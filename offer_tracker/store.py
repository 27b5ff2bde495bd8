# offer_tracker/store.py
"""Authoritative in-memory state with a durable snapshot.

`TrackerStore` owns both collections. Every read-modify-write runs under
one re-entrant lock and is followed by a synchronous save of the whole
snapshot. A failed save is logged and the in-memory state stays the
source of truth for the rest of the process lifetime.
"""
import threading
from contextlib import contextmanager
from datetime import timedelta
from typing import Any, Dict, Iterable, Iterator, List, Optional

from pydantic import ValidationError as SchemaError
from sqlalchemy.exc import SQLAlchemyError

from . import crud
from .db import Base, session_scope
from .errors import PersistenceError
from .ingest import ingest
from .schemas import Condition, Listing, Product, Snapshot, Tracker, TrackerStatus
from .utils import logger, utcnow


class SqlSnapshotBackend:
    """Stores the snapshot document in the `snapshots` table."""

    def __init__(self, engine, session_factory):
        self.engine = engine
        self.session_factory = session_factory

    def init(self):
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            raise PersistenceError(f"cannot create tables: {e}") from e

    def load(self) -> Optional[Dict[str, Any]]:
        try:
            with session_scope(self.session_factory) as db:
                return crud.get_snapshot(db)
        except SQLAlchemyError as e:
            raise PersistenceError(f"cannot read snapshot: {e}") from e

    def save(self, document: Dict[str, Any]):
        try:
            with session_scope(self.session_factory) as db:
                crud.put_snapshot(db, document)
        except SQLAlchemyError as e:
            raise PersistenceError(f"cannot write snapshot: {e}") from e


def demo_snapshot() -> Snapshot:
    now = utcnow()
    return Snapshot(trackers=[
        Tracker(
            id="mock-1",
            search_term="Macbook Pro M3",
            min_price=10000,
            max_price=15000,
            condition=Condition.NEW,
            location="SP",
            notify_address="(11) 99999-9999",
            created_at=now,
            status=TrackerStatus.ACTIVE,
        ),
        Tracker(
            id="mock-2",
            search_term="Playstation 5",
            min_price=3000,
            max_price=4000,
            condition=Condition.ALL,
            location="RJ",
            notify_address="(21) 98888-8888",
            created_at=now - timedelta(days=1),
            status=TrackerStatus.PENDING,
            confirmation_code="1234",
        ),
    ])


class TrackerStore:
    def __init__(self, backend, seed_demo_data: bool = False):
        self._backend = backend
        self._seed_demo_data = seed_demo_data
        self._lock = threading.RLock()
        self._state = Snapshot()
        self._product_ids = set()

    def load(self):
        """Replace the in-memory state with the durable snapshot.

        Never raises: an unreadable medium or a corrupt document leaves the
        store empty, a missing document leaves it empty or seeded.
        """
        with self._lock:
            try:
                self._backend.init()
                document = self._backend.load()
            except PersistenceError as e:
                logger.error("Snapshot load failed, starting empty: %s", e)
                self._replace(Snapshot())
                return
            if document is None:
                if self._seed_demo_data:
                    logger.info("No snapshot found, seeding demo trackers")
                    self._replace(demo_snapshot())
                    self._persist()
                else:
                    logger.info("No snapshot found, starting empty")
                    self._replace(Snapshot())
                return
            try:
                snapshot = Snapshot.model_validate(document)
            except SchemaError as e:
                logger.error("Snapshot document is corrupt, starting empty: %s", e)
                snapshot = Snapshot()
            self._replace(snapshot)
            logger.info("Loaded %d tracker(s) and %d product(s)", len(snapshot.trackers), len(snapshot.products))

    def _replace(self, snapshot: Snapshot):
        self._state = snapshot
        self._product_ids = {p.id for p in snapshot.products}

    def _persist(self):
        try:
            self._backend.save(self._state.model_dump(mode="json", by_alias=True))
        except PersistenceError as e:
            logger.error("Snapshot save failed, keeping in-memory state: %s", e)

    @contextmanager
    def mutate(self) -> Iterator[Snapshot]:
        """Lock the state for a read-modify-write and save it on a clean exit."""
        with self._lock:
            yield self._state
            self._persist()

    def get_tracker(self, tracker_id: str) -> Optional[Tracker]:
        with self._lock:
            tracker = self._state.find_tracker(tracker_id)
            return tracker.model_copy(deep=True) if tracker else None

    def list_trackers(self) -> List[Tracker]:
        with self._lock:
            trackers = [t.model_copy(deep=True) for t in self._state.trackers]
        return sorted(trackers, key=lambda t: t.created_at, reverse=True)

    def active_trackers(self) -> List[Tracker]:
        with self._lock:
            return [t.model_copy(deep=True) for t in self._state.trackers if t.status == TrackerStatus.ACTIVE]

    def list_products(self) -> List[Product]:
        with self._lock:
            products = list(self._state.products)
        return sorted(products, key=lambda p: p.found_at, reverse=True)

    def add_products(self, tracker_id: str, candidates: Iterable[Listing]) -> List[Product]:
        """Ingest `candidates` found for `tracker_id` and return the new products.

        Nothing is written when the tracker was deleted or deactivated
        after its search started.
        """
        with self._lock:
            tracker = self._state.find_tracker(tracker_id)
            if tracker is None or tracker.status != TrackerStatus.ACTIVE:
                logger.info("Dropping results for tracker=%s: no longer active", tracker_id)
                return []
            new_products = ingest(candidates, self._product_ids)
            if not new_products:
                return []
            self._state.products[:0] = new_products
            self._product_ids.update(p.id for p in new_products)
            self._persist()
        return new_products

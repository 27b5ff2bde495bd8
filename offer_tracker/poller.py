# offer_tracker/poller.py
"""Per-tracker polling pipeline: resolve -> search -> ingest -> persist -> notify.

Network calls happen outside the store lock; only the snapshot of active
trackers and the final append take it. A failure while polling one
tracker is logged and never reaches the other trackers of the cycle.
"""
from typing import List

from .notifier import product_message
from .schemas import Product, Tracker
from .utils import logger


class Poller:
    def __init__(self, store, resolver, client, notifier):
        self.store = store
        self.resolver = resolver
        self.client = client
        self.notifier = notifier

    def poll_tracker(self, tracker: Tracker) -> List[Product]:
        try:
            region_id = self.resolver.resolve(tracker.location)
            listings = list(self.client.search(
                tracker.search_term,
                tracker.min_price,
                tracker.max_price,
                tracker.condition,
                region_id,
            ))
            new_products = self.store.add_products(tracker.id, listings)
        except Exception as e:
            logger.exception("Polling failed tracker=%s term=%r: %s", tracker.id, tracker.search_term, e)
            return []
        if new_products:
            logger.info("Found %d new product(s) tracker=%s term=%r", len(new_products), tracker.id, tracker.search_term)
        for product in new_products:
            self.notifier.notify(tracker.notify_address, product_message(tracker, product))
        return new_products

    def run_cycle(self) -> int:
        """Poll every active tracker once; returns the number of new products."""
        trackers = self.store.active_trackers()
        if not trackers:
            logger.debug("No active trackers, skipping cycle")
            return 0
        logger.info("Polling %d active tracker(s)", len(trackers))
        total = 0
        for tracker in trackers:
            total += len(self.poll_tracker(tracker))
        return total

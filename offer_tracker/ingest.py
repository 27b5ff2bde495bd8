# offer_tracker/ingest.py
"""Turn candidate listings into new Product records.

`ingest` is pure: it never touches the store. The caller holds the store
lock, passes the set of ids already in the history and prepends the
returned products itself.
"""
from datetime import datetime
from typing import Iterable, List, Optional, Set

from .schemas import Listing, Product
from .utils import utcnow


def secure_thumbnail(url: str) -> str:
    if url.startswith("http:"):
        return "https:" + url[len("http:"):]
    return url


def to_product(listing: Listing, found_at: datetime) -> Product:
    return Product(
        id=listing.id,
        title=listing.title,
        price=listing.price,
        link=listing.permalink,
        thumbnail=secure_thumbnail(listing.thumbnail),
        found_at=found_at,
    )


def ingest(candidates: Iterable[Listing], existing_ids: Set[str], now: Optional[datetime] = None) -> List[Product]:
    """Return products for the candidates whose id is not in `existing_ids`.

    Products keep the order the marketplace returned them in. An id repeated
    inside `candidates` yields one product. `existing_ids` is not modified.
    """
    found_at = now or utcnow()
    batch_ids = set()
    new_products = []
    for listing in candidates:
        if listing.id in existing_ids or listing.id in batch_ids:
            continue
        batch_ids.add(listing.id)
        new_products.append(to_product(listing, found_at))
    return new_products

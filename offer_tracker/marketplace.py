# offer_tracker/marketplace.py
"""Marketplace search client.

`search` never raises: a failed or non-success call yields no listings,
exactly like a search with no results. The two cases are logged apart.
"""
from typing import Dict, Iterator, List, Optional

import requests
from pydantic import ValidationError as SchemaError

from .errors import UpstreamError
from .schemas import Condition, Listing
from .utils import logger


def build_query(term: str, min_price: float = 0, max_price: float = 0,
                condition: Condition = Condition.ALL, region_id: Optional[str] = None) -> Dict[str, str]:
    """Query parameters for one search; `all` and zero bounds are left out."""
    params = {"q": term}
    if condition and Condition(condition) != Condition.ALL:
        params["condition"] = Condition(condition).value
    low = _price_bound(min_price)
    high = _price_bound(max_price)
    if low or high:
        params["price"] = f"{low}-{high}"
    if region_id:
        params["state"] = region_id
    return params


def _price_bound(value) -> str:
    if not value or value <= 0:
        return ""
    # 3000.0 -> "3000"
    return str(int(value)) if float(value).is_integer() else str(value)


class MarketplaceClient:
    def __init__(self, api_base: str, site: str = "MLB", timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.api_base = api_base.rstrip("/")
        self.site = site
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def search_url(self) -> str:
        return f"{self.api_base}/sites/{self.site}/search"

    def search(self, term: str, min_price: float = 0, max_price: float = 0,
               condition: Condition = Condition.ALL, region_id: Optional[str] = None) -> Iterator[Listing]:
        params = build_query(term, min_price, max_price, condition, region_id)
        try:
            results = self._fetch(params)
        except UpstreamError as e:
            logger.warning("Search failed term=%r error=%s", term, e)
            return iter(())
        if not results:
            logger.info("Search returned no results term=%r", term)
        return self._iter_listings(results)

    def _fetch(self, params: Dict[str, str]) -> List[dict]:
        logger.debug("Searching %s params=%s", self.search_url, params)
        try:
            resp = self.session.get(self.search_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamError(f"request failed: {e}") from e
        if resp.status_code != 200:
            raise UpstreamError(f"status {resp.status_code} {resp.reason}")
        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamError("invalid JSON body") from e
        results = data.get("results") if isinstance(data, dict) else None
        return results if isinstance(results, list) else []

    def _iter_listings(self, results: List[dict]) -> Iterator[Listing]:
        for item in results:
            try:
                yield Listing.model_validate(item)
            except SchemaError as e:
                logger.warning("Skipping malformed listing: %s", e)

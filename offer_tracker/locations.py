# offer_tracker/locations.py
"""Location code -> marketplace region id, cached for the process lifetime."""
import threading
from typing import Dict, Optional

import requests

from .errors import UpstreamError
from .utils import logger


class LocationResolver:
    def __init__(self, api_base: str, country: str = "BR", timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.api_base = api_base.rstrip("/")
        self.country = country
        self.timeout = timeout
        self.session = session or requests.Session()
        self._cache: Dict[str, str] = {}
        self._lock = threading.Lock()

    def resolve(self, code: Optional[str]) -> Optional[str]:
        """Return the region id for `code`, or None to search nationwide."""
        if not code or not code.strip():
            return None
        key = code.strip().upper()
        with self._lock:
            if key in self._cache:
                return self._cache[key]
        try:
            region_id = self._lookup(key)
        except UpstreamError as e:
            logger.warning("Location lookup failed code=%s error=%s", key, e)
            return None
        with self._lock:
            self._cache[key] = region_id
        return region_id

    def _lookup(self, key: str) -> str:
        url = f"{self.api_base}/classified_locations/states/{self.country}-{key}"
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamError(f"request to {url} failed: {e}") from e
        if resp.status_code != 200:
            raise UpstreamError(f"{url} returned status {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamError(f"{url} returned invalid JSON") from e
        region_id = data.get("id") if isinstance(data, dict) else None
        if not region_id:
            raise UpstreamError(f"{url} returned no region id")
        return str(region_id)

# offer_tracker/notifier.py
"""Fire-and-forget notifications.

A channel delivers one message to one address and may raise. `Notifier`
wraps a channel so that callers never see a delivery failure.
"""
from typing import Optional

import requests

from .schemas import Product, TrackerOut
from .utils import logger, retry


class LogChannel:
    """Simulated channel: the message goes to the service log."""

    def send(self, address: str, message: str):
        logger.info("[notify -> %s] %s", address, message)


class WebhookChannel:
    """POSTs `{"to": address, "message": message}` to a webhook (e.g. a WhatsApp gateway)."""

    def __init__(self, url: str, timeout: float = 10.0, tries: int = 3, delay: float = 1,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self._post = retry(requests.RequestException, tries=max(tries, 1), delay=delay)(self._post_once)

    def _post_once(self, payload: dict):
        resp = self.session.post(self.url, json=payload, timeout=self.timeout)
        resp.raise_for_status()

    def send(self, address: str, message: str):
        self._post({"to": address, "message": message})


class Notifier:
    def __init__(self, channel=None):
        self.channel = channel or LogChannel()

    def notify(self, address: str, message: str) -> bool:
        """Dispatch `message`; returns False instead of raising on failure."""
        try:
            self.channel.send(address, message)
            return True
        except Exception as e:
            logger.error("Notification failed to=%s error=%s", address, e)
            return False


def code_message(tracker: TrackerOut, code: str, resent: bool = False) -> str:
    if resent:
        return f'Your new code for "{tracker.search_term}" is: {code}'
    return f'Your confirmation code for "{tracker.search_term}" is: {code}'


def format_price(price: Optional[float]) -> str:
    if price is None:
        return "n/a"
    # pt-BR grouping: 3500 -> "R$ 3.500,00"
    text = f"{price:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {text}"


def product_message(tracker: TrackerOut, product: Product) -> str:
    return (
        f'New offer for "{tracker.search_term}"\n'
        f"{product.title}\n"
        f"{format_price(product.price)}\n"
        f"{product.link}"
    )

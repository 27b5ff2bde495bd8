# offer_tracker/config.py
"""Runtime settings.

Values come from environment variables (a `.env` file in the working
directory is loaded first). Only the wiring in `main.py` reads these;
every component receives its parameters explicitly.
"""
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def normalize_database_url(url: str) -> str:
    # SQLAlchemy 2.x doesn't accept 'postgres://'
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg2://", 1)
    return url


class Settings(BaseModel):
    database_url: str = "sqlite:///./offer_tracker.db"
    marketplace_api_base: str = "https://api.mercadolibre.com"
    marketplace_site: str = "MLB"
    location_country: str = "BR"
    http_timeout: float = 10.0
    poll_interval_seconds: int = 30
    poll_enabled: bool = True
    notify_webhook_url: Optional[str] = None
    notify_retries: int = 3
    seed_demo_data: bool = False
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=normalize_database_url(os.getenv("DATABASE_URL", "sqlite:///./offer_tracker.db")),
            marketplace_api_base=os.getenv("MARKETPLACE_API_BASE", "https://api.mercadolibre.com").rstrip("/"),
            marketplace_site=os.getenv("MARKETPLACE_SITE", "MLB"),
            location_country=os.getenv("LOCATION_COUNTRY", "BR"),
            http_timeout=float(os.getenv("HTTP_TIMEOUT", "10")),
            poll_interval_seconds=int(os.getenv("POLL_INTERVAL_SECONDS", "30")),
            poll_enabled=_flag("POLL_ENABLED", "1"),
            notify_webhook_url=os.getenv("NOTIFY_WEBHOOK_URL") or None,
            notify_retries=int(os.getenv("NOTIFY_RETRIES", "3")),
            seed_demo_data=_flag("SEED_DEMO_DATA", "0"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
        )

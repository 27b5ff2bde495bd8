# offer_tracker/main.py
"""Application wiring: settings -> components -> FastAPI app."""
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import router as api_router
from .config import Settings
from .db import make_engine, make_session_factory
from .locations import LocationResolver
from .marketplace import MarketplaceClient
from .notifier import LogChannel, Notifier, WebhookChannel
from .poller import Poller
from .scheduler import PollScheduler
from .services import TrackerService
from .store import SqlSnapshotBackend, TrackerStore
from .utils import logger


@dataclass
class Components:
    store: TrackerStore
    poller: Poller
    service: TrackerService
    scheduler: PollScheduler


def build_components(settings: Settings, client=None, resolver=None, channel=None) -> Components:
    """Wire the engine. `client`, `resolver` and `channel` replace the real HTTP collaborators."""
    engine = make_engine(settings.database_url)
    store = TrackerStore(SqlSnapshotBackend(engine, make_session_factory(engine)), seed_demo_data=settings.seed_demo_data)
    if client is None:
        client = MarketplaceClient(settings.marketplace_api_base, settings.marketplace_site, timeout=settings.http_timeout)
    if resolver is None:
        resolver = LocationResolver(settings.marketplace_api_base, settings.location_country, timeout=settings.http_timeout)
    if channel is None:
        if settings.notify_webhook_url:
            channel = WebhookChannel(settings.notify_webhook_url, timeout=settings.http_timeout, tries=settings.notify_retries)
        else:
            channel = LogChannel()
    notifier = Notifier(channel)
    poller = Poller(store, resolver, client, notifier)
    service = TrackerService(store, notifier, poller)
    return Components(store, poller, service, PollScheduler(poller, settings.poll_interval_seconds))


def create_app(settings: Optional[Settings] = None, components: Optional[Components] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    components = components or build_components(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        components.store.load()
        if settings.poll_enabled:
            components.scheduler.start()
        else:
            logger.info("Polling disabled")
        yield
        components.scheduler.stop()

    app = FastAPI(title="offer-tracker", lifespan=lifespan)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    app.include_router(api_router, prefix="/api")
    app.state.store = components.store
    app.state.service = components.service
    app.state.poller = components.poller
    app.state.scheduler = components.scheduler

    @app.exception_handler(RequestValidationError)
    async def bad_request(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": "Invalid request body.", "errors": jsonable_encoder(exc.errors())})

    return app


def run():
    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()

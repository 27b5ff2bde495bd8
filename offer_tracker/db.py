# offer_tracker/db.py
"""Database engine and session utilities.

The durable medium is whatever SQLAlchemy URL the settings point at.
SQLite is the default; in-memory SQLite (`sqlite://`) shares a single
connection so that every session sees the same database.
"""
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from .config import normalize_database_url

Base = declarative_base()

def make_engine(database_url: str, pool_size: int = 5, max_overflow: int = 10):
    database_url = normalize_database_url(database_url)
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    # tuned pool settings for cloud DB
    return create_engine(
        database_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True
    )

def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)

@contextmanager
def session_scope(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()

# offer_tracker/models.py
"""SQLAlchemy ORM models for persisted entities.

The whole engine state lives in one JSON document (`SnapshotRow.document`);
there is a single row, keyed by `SNAPSHOT_KEY`.
"""
from sqlalchemy import Column, Text, JSON, TIMESTAMP, func
from .db import Base

SNAPSHOT_KEY = "state"

class SnapshotRow(Base):
    __tablename__ = "snapshots"
    key = Column(Text, primary_key=True)
    document = Column(JSON, nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

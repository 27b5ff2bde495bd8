# offer_tracker/crud.py
"""Read and replace the persisted snapshot document."""
from sqlalchemy.orm import Session
from typing import Any, Dict, Optional
from .models import SnapshotRow, SNAPSHOT_KEY

def get_snapshot(db: Session, key: str = SNAPSHOT_KEY) -> Optional[Dict[str, Any]]:
    obj = db.get(SnapshotRow, key)
    return obj.document if obj else None

def put_snapshot(db: Session, document: Dict[str, Any], key: str = SNAPSHOT_KEY):
    obj = db.get(SnapshotRow, key)
    if obj is None:
        db.add(SnapshotRow(key=key, document=document))
    else:
        # assign a new object so the JSON column is flagged dirty
        obj.document = document
    db.commit()

# offer_tracker/schemas.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Condition(str, Enum):
    ALL = "all"
    NEW = "new"
    USED = "used"


class TrackerStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"


class CamelModel(BaseModel):
    # wire format and snapshot document use camelCase keys
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TrackerCreate(CamelModel):
    search_term: str = ""
    min_price: float = Field(0, ge=0, allow_inf_nan=False)
    max_price: float = Field(0, ge=0, allow_inf_nan=False)
    condition: Condition = Condition.ALL
    location: str = ""
    notify_address: str = ""

    @field_validator("min_price", "max_price", mode="before")
    @classmethod
    def _blank_price(cls, v):
        return 0 if v is None or v == "" else v

    @field_validator("search_term", "location", "notify_address", mode="before")
    @classmethod
    def _blank_text(cls, v):
        return "" if v is None else v

    @field_validator("condition", mode="before")
    @classmethod
    def _blank_condition(cls, v):
        return Condition.ALL if v is None or v == "" else v


class TrackerOut(CamelModel):
    id: str
    search_term: str
    min_price: float = 0
    max_price: float = 0
    condition: Condition = Condition.ALL
    location: str = ""
    notify_address: str
    created_at: datetime
    status: TrackerStatus


class Tracker(TrackerOut):
    """Stored tracker. The confirmation code is set only while PENDING."""
    confirmation_code: Optional[str] = None

    def public(self) -> TrackerOut:
        return TrackerOut.model_validate(self.model_dump(exclude={"confirmation_code"}))


class ConfirmRequest(CamelModel):
    code: str = ""

    @field_validator("code", mode="before")
    @classmethod
    def _code_text(cls, v):
        return "" if v is None else str(v)


class Listing(BaseModel):
    """Raw search result as returned by the marketplace."""
    id: str
    title: str = ""
    price: Optional[float] = None
    permalink: str = ""
    thumbnail: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _id_text(cls, v):
        return str(v) if isinstance(v, int) else v

    @field_validator("title", "permalink", "thumbnail", mode="before")
    @classmethod
    def _blank_text(cls, v):
        return "" if v is None else v


class Product(CamelModel):
    id: str
    title: str = ""
    price: Optional[float] = None
    link: str = ""
    thumbnail: str = ""
    found_at: datetime


class Snapshot(CamelModel):
    """The full persisted state: one document, both collections."""
    trackers: List[Tracker] = Field(default_factory=list)
    products: List[Product] = Field(default_factory=list)

    def find_tracker(self, tracker_id: str) -> Optional[Tracker]:
        return next((t for t in self.trackers if t.id == tracker_id), None)

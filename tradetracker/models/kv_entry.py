"""KVEntry model — one JSON document per logical storage key."""

from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class KVEntry(SQLModel, table=True):
    __tablename__ = "kv_entry"

    key: str = Field(primary_key=True, max_length=64)
    value: str  # JSON-encoded document
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

"""Key-value persistence for trades and balance.

Each logical key holds a single JSON document that is always overwritten as a
whole. Reads never fail: a missing key, a corrupt document or a database error
all read as "nothing stored".
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from tradetracker.models.kv_entry import KVEntry

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when a document could not be written."""


class KeyValueStore(Protocol):
    def load(self, key: str) -> Any | None: ...

    def save(self, key: str, value: Any) -> None: ...


class SQLStore:
    """KeyValueStore backed by the ``kv_entry`` table."""

    def __init__(self, engine):
        self.engine = engine

    def load(self, key: str) -> Any | None:
        try:
            with Session(self.engine) as session:
                entry = session.get(KVEntry, key)
                raw = entry.value if entry else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read '{key}' from store: {e}")
            return None

        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Stored value for '{key}' is not valid JSON, ignoring: {e}")
            return None

    def save(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        try:
            with Session(self.engine) as session:
                entry = session.get(KVEntry, key)
                if entry is None:
                    entry = KVEntry(key=key, value=payload)
                else:
                    entry.value = payload
                    entry.updated_at = datetime.now(timezone.utc)
                session.add(entry)
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to write '{key}': {e}") from e

"""recordstore: CRUD over SQLite tables with an integer Id and a text Name."""
from __future__ import annotations

from .errors import ConnectionError, NotFoundError, RecordStoreError, StatementError, UnknownTableError
from .store import RecordStore

__all__ = [
    "RecordStore",
    "RecordStoreError",
    "ConnectionError",
    "NotFoundError",
    "StatementError",
    "UnknownTableError",
]

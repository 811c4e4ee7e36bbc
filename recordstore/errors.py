"""Errors raised by recordstore.

Statement failures are not wrapped: whatever sqlite3 raises while a
statement is prepared or executed reaches the caller as is.
``StatementError`` names that family.
"""
from __future__ import annotations

import sqlite3

StatementError = sqlite3.Error


class RecordStoreError(Exception):
    pass


class ConnectionError(RecordStoreError):  # noqa: A001
    """The database could not be opened. ``__cause__`` holds the driver error."""


class NotFoundError(RecordStoreError, LookupError):
    def __init__(self, table: str, name: str):
        self.table = table
        self.name = name
        super().__init__(f"No record with the name '{name}' found in table '{table}'.")


class UnknownTableError(RecordStoreError, ValueError):
    def __init__(self, table: str):
        self.table = table
        super().__init__(f"Table '{table}' is not in the allowed tables.")

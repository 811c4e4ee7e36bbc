"""
CRUD access to Id/Name tables over one owned SQLite connection.

Table names are put into the SQL text as given; only values are bound.
Pass ``allowed_tables`` when table names can come from untrusted input.
"""
from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import closing
from sqlite3 import Connection, Row
from typing import Dict, Iterable, List, Optional, Sequence

from . import errors
from .db import open_connection

logger = logging.getLogger(__name__)

TABLE_NAMES_SQL = "SELECT name FROM sqlite_master WHERE type='table'"


class RecordStore:
    """Insert, fetch, update and delete ``(Id, Name)`` rows in caller-named tables."""

    def __init__(self, target: str | os.PathLike | None = None, allowed_tables: Optional[Iterable[str]] = None):
        self._allowed = frozenset(allowed_tables) if allowed_tables is not None else None
        self._conn: Optional[Connection] = open_connection(target)

    @property
    def connection(self) -> Connection:
        if self._conn is None:
            raise errors.RecordStoreError("RecordStore is closed")
        return self._conn

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("connection closed")

    def __enter__(self) -> "RecordStore":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ---------------- writes ----------------

    def add_record(self, table: str, name: str):
        self._execute_non_query(f"INSERT INTO {self._table(table)} (Name) VALUES (?)", (name,))

    def update_record(self, table: str, record_id: int, new_name: str):
        """Rename the row with ``record_id``. A missing id changes nothing and is not an error."""
        self._execute_non_query(f"UPDATE {self._table(table)} SET Name = ? WHERE Id = ?", (new_name, record_id))

    def delete_record(self, table: str, record_id: int):
        self._execute_non_query(f"DELETE FROM {self._table(table)} WHERE Id = ?", (record_id,))

    # ---------------- reads ----------------

    def get_all_records(self, table: str) -> List[str]:
        rows = self._fetch_all(f"SELECT Name FROM {self._table(table)}")
        return [r[0] for r in rows]

    def get_record_id_by_name(self, table: str, name: str) -> int:
        """
        Return the Id of a row named ``name``.

        With several rows of that name, which one comes back is up to SQLite.
        Raises NotFoundError when no row matches.
        """
        rows = self._fetch_all(f"SELECT Id FROM {self._table(table)} WHERE Name = ? LIMIT 1", (name,))
        if not rows:
            raise errors.NotFoundError(table, name)
        return _record_id(table, rows[0][0])

    def get_all_table_names(self) -> List[str]:
        return [r[0] for r in self._fetch_all(TABLE_NAMES_SQL)]

    def get_all_records_with_ids(self, table: str) -> Dict[int, str]:
        out: Dict[int, str] = {}
        for r in self._fetch_all(f"SELECT Id, Name FROM {self._table(table)}"):
            out[_record_id(table, r[0])] = r[1]
        return out

    # ---------------- helpers ----------------

    def _table(self, table: str) -> str:
        if self._allowed is not None and table not in self._allowed:
            raise errors.UnknownTableError(table)
        return table

    def _execute_non_query(self, sql: str, params: Sequence = ()):
        logger.debug("execute: %s", sql)
        with closing(self.connection.cursor()) as cur:
            cur.execute(sql, params)

    def _fetch_all(self, sql: str, params: Sequence = ()) -> List[Row]:
        logger.debug("query: %s", sql)
        with closing(self.connection.cursor()) as cur:
            cur.execute(sql, params)
            return cur.fetchall()


def _record_id(table: str, value) -> int:
    # Id columns that are not INTEGER PRIMARY KEY can hold NULL or text
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise sqlite3.DataError(f"Non-integer Id {value!r} in table '{table}'.")

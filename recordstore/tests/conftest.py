import os
import sqlite3
from pathlib import Path

import pytest

from recordstore import RecordStore

SCHEMA_SQL = Path(__file__).resolve().parents[2] / "schema.sql"
TABLES = ["Users", "Products", "empty_table"]


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    """One schema-initialized DB per session; also the default target of RecordStore()."""
    path = tmp_path_factory.mktemp("records") / "records_test.db"
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(SCHEMA_SQL.read_text(encoding="utf-8"))
    finally:
        conn.close()
    os.environ["RECORDSTORE_DB_PATH"] = str(path)
    return str(path)


@pytest.fixture(autouse=True)
def _empty_tables(tmp_db_path):
    assert os.environ.get("RECORDSTORE_DB_PATH") == tmp_db_path
    conn = sqlite3.connect(tmp_db_path, isolation_level=None)
    try:
        for t in TABLES:
            conn.execute(f"DELETE FROM {t}")
    finally:
        conn.close()


@pytest.fixture()
def store(tmp_db_path):
    with RecordStore(tmp_db_path) as s:
        yield s


@pytest.fixture()
def memory_store():
    with RecordStore(":memory:") as s:
        yield s

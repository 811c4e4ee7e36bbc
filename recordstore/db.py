from __future__ import annotations

# recordstore/db.py
import logging
import os
import re
import sqlite3

import yaml

from . import errors

logger = logging.getLogger(__name__)

# Default target resolution order:
# 1) env RECORDSTORE_DB_PATH (highest priority)
# 2) config.yaml test_db_path (when running under tests)
# 3) config.yaml db_path
# 4) fallback: records.db in the project root
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "records.db")

_DATA_SOURCE_KEYS = ("data source", "datasource", "filename")
_CONN_STRING_RE = re.compile(r"(?:^|;)\s*(?:data\s*source|filename)\s*=", re.IGNORECASE)


def _config_path() -> str:
    return os.environ.get("RECORDSTORE_CONFIG") or os.path.join(_PROJECT_ROOT, "config.yaml")


def read_config_yaml(path: str | None = None) -> dict:
    cfg_path = path or _config_path()
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("ignoring unreadable config %s: %s", cfg_path, e)
        return {}
    if not isinstance(cfg, dict):
        logger.warning("ignoring config %s: top level is not a mapping", cfg_path)
        return {}
    out = {}
    for k in ("db_path", "test_db_path"):
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    return out


def get_db_path() -> str:
    env_path = os.environ.get("RECORDSTORE_DB_PATH")
    cfg = read_config_yaml()
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif is_test and cfg_test:
        path = cfg_test
    elif cfg_db:
        path = cfg_db
    else:
        path = _ROOT_DB

    if path != ":memory:":
        dirn = os.path.dirname(path) or "."
        os.makedirs(dirn, exist_ok=True)
    return path


def parse_connection_string(conn_str: str) -> str:
    """Extract the database file from a ``Key=Value;...`` connection string.

    Only the data source matters to sqlite3; other keys (``Mode``,
    ``Cache``, ``Password``...) are ignored.
    """
    for part in conn_str.split(";"):
        if "=" not in part:
            continue
        key, _, value = part.partition("=")
        if key.strip().lower() in _DATA_SOURCE_KEYS and value.strip():
            return value.strip()
    raise errors.ConnectionError(f"no data source in connection string {conn_str!r}")


def resolve_target(target: str | os.PathLike | None) -> tuple[str, bool]:
    """Return ``(database, uri)`` suitable for :func:`sqlite3.connect`."""
    if target is None:
        return get_db_path(), False
    target = os.fspath(target)
    if target.startswith("file:"):
        return target, True
    if _CONN_STRING_RE.search(target):
        return parse_connection_string(target), False
    return target, False


def open_connection(target: str | os.PathLike | None = None) -> sqlite3.Connection:
    """
    Open the SQLite connection a RecordStore owns for its lifetime.

    Autocommit (``isolation_level=None``), foreign keys on, rows as
    :class:`sqlite3.Row`. Any failure to resolve or open the target is
    raised as :class:`errors.ConnectionError` chained to the original.
    """
    database = target
    try:
        database, uri = resolve_target(target)
        conn = sqlite3.connect(
            database,
            detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES,
            check_same_thread=False,
            isolation_level=None,
            uri=uri,
        )
    except (sqlite3.Error, OSError, ValueError) as e:
        raise errors.ConnectionError(f"Error establishing database connection to {database!r}.") from e

    try:
        conn.execute("PRAGMA foreign_keys = ON;")
    except sqlite3.Error as e:
        conn.close()
        raise errors.ConnectionError(f"Error establishing database connection to {database!r}.") from e
    conn.row_factory = sqlite3.Row
    logger.info("opened database %s", database)
    return conn

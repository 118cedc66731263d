from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator

import streamlit as st

from tracker.schema import SCHEMA_SQL

# One writer at a time across Streamlit sessions sharing the cached connection.
_WRITE_LOCK = threading.RLock()


def connect(db_path: Path) -> sqlite3.Connection:
    # isolation_level=None: transactions are opened explicitly by transaction()
    conn = sqlite3.connect(str(db_path), check_same_thread=False, isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@st.cache_resource
def get_conn(db_path: Path) -> sqlite3.Connection:
    return connect(db_path)


def _column_exists(conn: sqlite3.Connection, table: str, column: str) -> bool:
    rows = conn.execute(f"PRAGMA table_info({table});").fetchall()
    cols = [r["name"] for r in rows]
    return column in cols


def ensure_schema(conn: sqlite3.Connection) -> None:
    with _WRITE_LOCK:
        # Create base schema (for new installs)
        conn.executescript(SCHEMA_SQL)

        # ---- migrations for existing installs ----
        if not _column_exists(conn, "skus", "created_by"):
            conn.execute("ALTER TABLE skus ADD COLUMN created_by TEXT;")
        if not _column_exists(conn, "batches", "created_by"):
            conn.execute("ALTER TABLE batches ADD COLUMN created_by TEXT;")


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    Serialized write transaction.

    Takes the process-wide write lock and a RESERVED lock on the database
    (BEGIN IMMEDIATE), so a read-then-insert inside the block cannot interleave
    with another writer. Commits on success, rolls back on any exception.
    """
    with _WRITE_LOCK:
        conn.execute("BEGIN IMMEDIATE;")
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK;")
            raise
        else:
            conn.execute("COMMIT;")


def q(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
    cur = conn.execute(sql, tuple(params))
    rows = cur.fetchall()
    cur.close()
    return rows


def x(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> int:
    """Execute one write. Autocommits unless called inside transaction()."""
    cur = conn.execute(sql, tuple(params))
    last = cur.lastrowid
    cur.close()
    return int(last) if last is not None else 0

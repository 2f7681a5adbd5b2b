from __future__ import annotations

# inventory/db.py
import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from .errors import AllocationFailure, ConnectionFailure, diagnostic_from
from .services.config_svc import get_config

logger = logging.getLogger(__name__)

SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schema.sql")

DISCONNECTED = "DISCONNECTED"
CONNECTED = "CONNECTED"


def get_connection_string(config_path: str | None = None) -> str:
    return get_config(config_path)["connection_string"]


class Database:
    """Handle to one database session.

    `driver` is any DB-API 2.0 module using the qmark paramstyle (``?``);
    the default is sqlite3, where the connection string is a file path or a
    ``file:`` URI. The handle moves DISCONNECTED -> CONNECTED -> DISCONNECTED
    and only a connected handle can hand out statements.

    Every statement is its own unit of work: sqlite3 runs in autocommit mode,
    other drivers get commit() after each successful statement and
    rollback() after a failed one.
    """

    def __init__(self, connection_string: str, driver: Any = sqlite3, **connect_kwargs):
        if not connection_string:
            raise ValueError("connection_string is required")
        self.connection_string = connection_string
        self.driver = driver
        self._connect_kwargs = connect_kwargs
        self._conn = None
        self._manual_commit = driver is not sqlite3

    @property
    def state(self) -> str:
        return CONNECTED if self._conn is not None else DISCONNECTED

    @property
    def connected(self) -> bool:
        return self._conn is not None

    @property
    def connection(self):
        if self._conn is None:
            raise ConnectionFailure("Database is not connected.")
        return self._conn

    def connect(self) -> "Database":
        if self._conn is not None:
            raise ConnectionFailure("Database is already connected.")
        try:
            if self.driver is sqlite3:
                conn = sqlite3.connect(
                    self.connection_string,
                    uri=self.connection_string.startswith("file:"),
                    isolation_level=None,
                    **self._connect_kwargs,
                )
                conn.execute("PRAGMA foreign_keys = ON;")
                conn.row_factory = sqlite3.Row
            else:
                conn = self.driver.connect(self.connection_string, **self._connect_kwargs)
        except self.driver.Error as e:
            raise ConnectionFailure("Error connecting to the database.", diagnostic_from(e)) from e
        self._conn = conn
        logger.debug("connected: %s", self.connection_string)
        return self

    def disconnect(self) -> None:
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        try:
            conn.close()
        finally:
            logger.debug("disconnected: %s", self.connection_string)

    def commit(self) -> None:
        if self._manual_commit:
            self.connection.commit()

    def rollback(self) -> None:
        if self._manual_commit and self._conn is not None:
            self._conn.rollback()

    def allocate(self):
        """New cursor (statement handle). The caller owns closing it."""
        conn = self.connection
        try:
            return conn.cursor()
        except self.driver.Error as e:
            raise AllocationFailure("Error allocating statement handle.", diagnostic_from(e)) from e

    def __enter__(self) -> "Database":
        if not self.connected:
            self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    def __repr__(self) -> str:
        return f"Database({self.connection_string!r}, state={self.state})"


@contextmanager
def get_conn(connection_string: Optional[str] = None) -> Iterator[Database]:
    """
    Open a session; prefer the explicit connection string, else get_connection_string().
    Always disconnected on exit.
    """
    db = Database(connection_string or get_connection_string())
    db.connect()
    try:
        yield db
    finally:
        db.disconnect()


def init_schema(db: Database, schema_path: str = SCHEMA_PATH) -> None:
    with open(schema_path, "r", encoding="utf-8") as f:
        script = f.read()
    conn = db.connection
    if hasattr(conn, "executescript"):
        conn.executescript(script)
    else:
        cur = db.allocate()
        try:
            for part in script.split(";"):
                if part.strip():
                    cur.execute(part)
        finally:
            cur.close()

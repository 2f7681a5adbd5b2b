import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from inventory.db import Database, SCHEMA_PATH


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "inventory_test.db"
    # Point the app at this temp DB
    os.environ["INVENTORY_DSN"] = str(path)
    schema = Path(SCHEMA_PATH).read_text(encoding="utf-8")
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(schema)
        conn.commit()
    finally:
        conn.close()
    return str(path)


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Safety: only ever wipe the temp DB
    assert os.environ.get("INVENTORY_DSN") == tmp_db_path, "Refusing to clean non-temp DB"
    conn = sqlite3.connect(tmp_db_path)
    try:
        for t in ("Products", "Suppliers"):
            conn.execute(f"DELETE FROM {t}")
        # restart AUTOINCREMENT ids so generated ids are predictable
        conn.execute("DELETE FROM sqlite_sequence")
        conn.commit()
    finally:
        conn.close()
    yield


@pytest.fixture()
def db(tmp_db_path):
    with Database(tmp_db_path) as d:
        yield d


@pytest.fixture()
def client(tmp_db_path):
    from inventory.api import app
    from fastapi.testclient import TestClient
    return TestClient(app)


class CountingCursor:
    """Cursor proxy that counts close() calls and fetches."""

    def __init__(self, cur, counts, messages=None):
        self._cur = cur
        self._counts = counts
        if messages is not None:
            self.messages = messages

    def execute(self, sql, params=()):
        self._counts["executed"] += 1
        self._cur.execute(sql, params)
        return self

    def fetchone(self):
        self._counts["fetched"] += 1
        return self._cur.fetchone()

    def close(self):
        self._counts["closed"] += 1
        self._cur.close()

    def __getattr__(self, name):
        return getattr(self._cur, name)


class CountingDatabase(Database):
    def __init__(self, *a, messages=None, **kw):
        super().__init__(*a, **kw)
        self.counts = {"allocated": 0, "closed": 0, "executed": 0, "fetched": 0}
        self.messages = messages

    def allocate(self):
        cur = super().allocate()
        self.counts["allocated"] += 1
        return CountingCursor(cur, self.counts, self.messages)


@pytest.fixture()
def counting_db(tmp_db_path):
    with CountingDatabase(tmp_db_path) as d:
        yield d


@pytest.fixture()
def make_counting_db(tmp_db_path):
    opened = []

    def _make(messages=None):
        d = CountingDatabase(tmp_db_path, messages=messages).connect()
        opened.append(d)
        return d

    yield _make
    for d in opened:
        d.disconnect()

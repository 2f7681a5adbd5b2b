import json
import logging

import pytest

from inventory.errors import ExecutionFailure
from inventory.logs import LogContext
from inventory.repository import executor
from inventory.repository.reader import MAX_VALUE_CHARS, ResultReader, to_text
from inventory.repository.statements import build_insert, build_select, column_set


def _seed(db, n):
    for i in range(n):
        executor.execute(db, build_insert("Suppliers", column_set({"SupplierName": f"S{i}", "Address": f"A{i}"})))


def _reader(db, columns=("SupplierID", "SupplierName"), **kw):
    cur = executor.open_cursor(db, build_select("Suppliers", list(columns)))
    return ResultReader(cur, columns, error_type=db.driver.Error, **kw)


def _first(db, columns, **kw):
    with _reader(db, columns=columns, **kw) as reader:
        return next(reader)


def test_to_text():
    assert to_text(None) is None
    assert to_text(12) == "12"
    assert to_text(2.5) == "2.5"
    assert to_text(b"abc") == "abc"
    assert to_text("x" * 10, max_chars=4) == "xxxx"
    assert to_text("x" * 10, max_chars=None) == "x" * 10


def test_rows_keyed_by_requested_columns_in_order(db):
    _seed(db, 1)
    with _reader(db, columns=("SupplierName", "SupplierID")) as reader:
        rows = list(reader)
    assert rows == [{"SupplierName": "S0", "SupplierID": "1"}]
    assert list(rows[0].keys()) == ["SupplierName", "SupplierID"]


def test_reader_is_lazy(counting_db):
    _seed(counting_db, 3)
    reader = _reader(counting_db)
    before = counting_db.counts["fetched"]
    first = next(reader)
    assert first["SupplierName"] == "S0"
    assert counting_db.counts["fetched"] == before + 1
    reader.close()


def test_reader_is_finite_and_not_restartable(counting_db):
    _seed(counting_db, 3)
    reader = _reader(counting_db)
    assert len(list(reader)) == 3
    assert reader.exhausted
    assert reader.rows_read == 3
    assert list(reader) == []
    # cursor released once, at exhaustion
    assert counting_db.counts["closed"] == counting_db.counts["allocated"]


def test_close_is_idempotent_and_releases_once(counting_db):
    _seed(counting_db, 2)
    allocated_before = counting_db.counts["allocated"]
    closed_before = counting_db.counts["closed"]
    with _reader(counting_db) as reader:
        next(reader)
    reader.close()
    assert counting_db.counts["allocated"] - allocated_before == 1
    assert counting_db.counts["closed"] - closed_before == 1
    with pytest.raises(StopIteration):
        next(reader)


def test_long_values_are_truncated(db):
    executor.execute(db, build_insert("Suppliers", column_set({"SupplierName": "L", "Address": "y" * 3000})))
    row = _first(db, ("Address",))
    assert len(row["Address"]) == MAX_VALUE_CHARS
    row = _first(db, ("Address",), max_value_chars=10)
    assert row["Address"] == "y" * 10
    row = _first(db, ("Address",), max_value_chars=None)
    assert len(row["Address"]) == 3000


def test_null_stays_none(db):
    executor.execute(db, build_insert("Suppliers", column_set({"SupplierName": "N"})))
    row = _first(db, ("SupplierName", "ContactInfo"))
    assert row == {"SupplierName": "N", "ContactInfo": None}


class _BrokenCursor:
    def __init__(self):
        self.closed = 0

    def fetchone(self):
        raise RuntimeError("connection lost")

    def close(self):
        self.closed += 1


def test_fetch_error_surfaces_as_execution_failure():
    cur = _BrokenCursor()
    reader = ResultReader(cur, ["a"], error_type=RuntimeError)
    with pytest.raises(ExecutionFailure) as ei:
        next(reader)
    assert "connection lost" in ei.value.diagnostic.message
    assert cur.closed == 1
    assert list(reader) == []


def test_star_uses_result_column_names(db):
    executor.execute(db, build_insert("Suppliers", column_set({"SupplierName": "S", "Address": "A"})))
    with _reader(db, columns=("*",)) as reader:
        assert reader.column_names == ["SupplierID", "SupplierName", "ContactInfo", "Address"]
        rows = list(reader)
    assert rows == [{"SupplierID": "1", "SupplierName": "S", "ContactInfo": None, "Address": "A"}]


def test_fetch_error_is_logged(caplog):
    caplog.set_level(logging.INFO, logger="inventory.oplog")
    reader = ResultReader(_BrokenCursor(), ["a"], error_type=RuntimeError, log=LogContext("SELECT"))
    with pytest.raises(ExecutionFailure):
        next(reader)
    recs = [json.loads(r.getMessage()) for r in caplog.records if r.name == "inventory.oplog"]
    assert len(recs) == 1
    assert recs[0]["result"] == "ERROR"
    assert "connection lost" in recs[0]["err_msg"]

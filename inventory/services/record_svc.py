# inventory/services/record_svc.py
"""Record operations: Insert / Select / Update / Delete on any table.

Values always travel as bound parameters. Table names, column names and
conditions are written into the SQL as given, so callers must only pass
trusted text for those (the CLI operator, or fixed strings in code). A
condition such as ``"SupplierID = '4'"`` is used exactly as written.

Failures come back as typed errors (see ``inventory.errors``); deciding to
abort is up to the caller.
"""
from __future__ import annotations

from typing import Optional, Sequence

from ..db import Database
from ..errors import DataAccessError
from ..logs import LogContext
from ..repository import executor
from ..repository.executor import ExecResult, Outcome
from ..repository.reader import MAX_VALUE_CHARS, ResultReader
from ..repository.statements import ColumnSet, Statement, build_delete, build_insert, build_select, build_update


def _run_write(db: Database, stmt: Statement, log: LogContext) -> ExecResult:
    try:
        res = executor.execute(db, stmt)
    except DataAccessError as e:
        log.write("ERROR", f"{e.kind}: {e.diagnostic.state} {e.diagnostic.message}")
        raise
    log.set_after({"rowcount": res.rowcount, "lastrowid": res.lastrowid})
    if res.outcome is Outcome.SUCCESS_WITH_WARNINGS:
        log.write("WARN", "; ".join(f"{w.state} {w.message}" for w in res.warnings))
    else:
        log.write("OK")
    return res


def insert(db: Database, table: str, columns: ColumnSet, log: Optional[LogContext] = None) -> ExecResult:
    log = log or LogContext("INSERT")
    log.set_entity(table, None)
    log.set_payload({"columns": [list(c) for c in columns]})
    return _run_write(db, build_insert(table, columns), log)


def update(
    db: Database,
    table: str,
    columns: ColumnSet,
    condition: str,
    allow_all: bool = False,
    log: Optional[LogContext] = None,
) -> ExecResult:
    log = log or LogContext("UPDATE")
    log.set_entity(table, condition or None)
    log.set_payload({"columns": [list(c) for c in columns], "condition": condition})
    return _run_write(db, build_update(table, columns, condition, allow_all=allow_all), log)


def delete(
    db: Database,
    table: str,
    condition: str,
    allow_all: bool = False,
    log: Optional[LogContext] = None,
) -> ExecResult:
    log = log or LogContext("DELETE")
    log.set_entity(table, condition or None)
    log.set_payload({"condition": condition})
    return _run_write(db, build_delete(table, condition, allow_all=allow_all), log)


def select(
    db: Database,
    table: str,
    column_names: Sequence[str],
    condition: str = "",
    max_value_chars: Optional[int] = MAX_VALUE_CHARS,
    log: Optional[LogContext] = None,
) -> ResultReader:
    """Run the SELECT and return a lazy reader over its rows.

    The reader holds the statement open until it is exhausted or closed;
    use it as a context manager when stopping early. The operation is
    logged once the reader is exhausted, closed, or fails mid-fetch.
    """
    log = log or LogContext("SELECT")
    log.set_entity(table, condition or None)
    log.set_payload({"columns": list(column_names), "condition": condition})
    stmt = build_select(table, column_names, condition)
    try:
        cur = executor.open_cursor(db, stmt)
    except DataAccessError as e:
        log.write("ERROR", f"{e.kind}: {e.diagnostic.state} {e.diagnostic.message}")
        raise
    return ResultReader(cur, column_names, max_value_chars=max_value_chars, error_type=db.driver.Error, log=log)

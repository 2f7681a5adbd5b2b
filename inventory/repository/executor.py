from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, List, NamedTuple, Optional, Tuple

from ..db import Database
from ..errors import (
    BindFailure,
    DataAccessError,
    Diagnostic,
    ExecutionFailure,
    PrepareFailure,
    diagnostic_from,
)
from .statements import Statement

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    SUCCESS = "SUCCESS"
    SUCCESS_WITH_WARNINGS = "SUCCESS_WITH_WARNINGS"


class ExecResult(NamedTuple):
    outcome: Outcome
    rowcount: int
    lastrowid: Optional[int] = None
    warnings: Tuple[Diagnostic, ...] = ()


# SQLSTATE classes: 42 syntax/access rule, 37 (ODBC 2) syntax; 07 dynamic SQL
# (parameter count), 22 data exception (bad value for the column type).
_PREPARE_STATES = ("42", "37")
_BIND_STATES = ("07", "22")
_PREPARE_MARKERS = (
    "syntax error",
    "no such table",
    "no such column",
    "has no column named",
    "incomplete input",
    "one statement at a time",
)
_BIND_MARKERS = ("bindings", "binding parameter", "datatype mismatch")


def classify(exc: BaseException) -> type[DataAccessError]:
    """Map a driver exception to PrepareFailure / BindFailure / ExecutionFailure."""
    diag = diagnostic_from(exc)
    if diag.state.startswith(_PREPARE_STATES):
        return PrepareFailure
    if diag.state.startswith(_BIND_STATES):
        return BindFailure
    names = {c.__name__ for c in type(exc).__mro__}
    msg = str(exc).lower()
    if "InterfaceError" in names or any(m in msg for m in _BIND_MARKERS):
        return BindFailure
    if any(m in msg for m in _PREPARE_MARKERS):
        return PrepareFailure
    return ExecutionFailure


_FAILURE_TEXT = {
    PrepareFailure: "Error preparing statement.",
    BindFailure: "Error binding parameters.",
    ExecutionFailure: "Error executing statement.",
}


@contextmanager
def statement_handle(db: Database) -> Iterator:
    """Allocate a cursor and close it exactly once, whatever happens inside."""
    cur = db.allocate()
    try:
        yield cur
    finally:
        cur.close()


def _run(db: Database, cur, stmt: Statement) -> None:
    try:
        cur.execute(stmt.sql, stmt.params)
    except db.driver.Error as e:
        db.rollback()
        kind = classify(e)
        diag = diagnostic_from(e)
        logger.debug("statement failed (%s): %s | %s", kind.kind, stmt.sql, diag.message)
        raise kind(_FAILURE_TEXT[kind], diag) from e


def _driver_messages(cur) -> Tuple[Diagnostic, ...]:
    # pyodbc-style drivers expose informational records on cursor.messages
    msgs = getattr(cur, "messages", None) or []
    out: List[Diagnostic] = []
    for m in msgs:
        if isinstance(m, (tuple, list)) and len(m) >= 2:
            out.append(Diagnostic(str(m[0]), str(m[1])))
        else:
            out.append(Diagnostic("01000", str(m)))
    return tuple(out)


def _commit(db: Database) -> None:
    try:
        db.commit()
    except db.driver.Error as e:
        db.rollback()
        raise ExecutionFailure("Error committing statement.", diagnostic_from(e)) from e


def execute(db: Database, stmt: Statement) -> ExecResult:
    """Prepare, bind positionally, execute; release the statement on every path."""
    with statement_handle(db) as cur:
        _run(db, cur, stmt)
        warnings = _driver_messages(cur)
        rowcount = cur.rowcount if cur.rowcount is not None else -1
        lastrowid = getattr(cur, "lastrowid", None)
    _commit(db)
    outcome = Outcome.SUCCESS_WITH_WARNINGS if warnings else Outcome.SUCCESS
    for w in warnings:
        logger.warning("SQLSTATE %s: %s", w.state, w.message)
    return ExecResult(outcome, rowcount, lastrowid, warnings)


def open_cursor(db: Database, stmt: Statement):
    """Execute and return the still-open cursor (SELECT path).

    Ownership of the cursor passes to the caller; on failure it is closed here.
    """
    cur = db.allocate()
    try:
        _run(db, cur, stmt)
    except BaseException:
        cur.close()
        raise
    return cur

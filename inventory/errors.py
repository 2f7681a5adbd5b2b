"""Typed failures raised by the data-access layer.

Nothing here terminates the process; the CLI / API decide what to do with
an error. Each error carries the driver's diagnostic (state code + message).
"""
from __future__ import annotations

from typing import NamedTuple, Optional


class Diagnostic(NamedTuple):
    state: str
    message: str


class DataAccessError(Exception):
    kind = "DataAccessError"

    def __init__(self, msg: str, diagnostic: Optional[Diagnostic] = None):
        super().__init__(msg)
        self.msg = msg
        self.diagnostic = diagnostic or Diagnostic("HY000", msg)

    def __str__(self) -> str:
        return f"{self.msg}\nSQLSTATE: {self.diagnostic.state}\nError: {self.diagnostic.message}"


class AllocationFailure(DataAccessError):
    """Could not obtain a statement (cursor) handle."""
    kind = "AllocationFailure"


class PrepareFailure(DataAccessError):
    """Malformed SQL, or it references an unknown table/column."""
    kind = "PrepareFailure"


class BindFailure(DataAccessError):
    """Parameter count or type mismatch."""
    kind = "BindFailure"


class ExecutionFailure(DataAccessError):
    """Engine rejected the statement at run time (constraint, I/O, ...)."""
    kind = "ExecutionFailure"


class ConnectionFailure(DataAccessError):
    """No usable session."""
    kind = "ConnectionFailure"


_SQLSTATE_LEN = 5


def diagnostic_from(exc: BaseException) -> Diagnostic:
    """Pull (state, message) out of a driver exception.

    ODBC-style drivers put the SQLSTATE in args[0]; sqlite3 exposes the
    engine's error name (3.11+). Fall back to the exception class name.
    """
    args = getattr(exc, "args", ())
    if len(args) >= 2 and isinstance(args[0], str) and len(args[0]) == _SQLSTATE_LEN and args[0].isalnum():
        return Diagnostic(args[0], str(args[1]))
    state = getattr(exc, "sqlite_errorname", None) or type(exc).__name__
    return Diagnostic(state, str(exc))

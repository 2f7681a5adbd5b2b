"""Forward-only reader over an executed SELECT cursor.

Rows are fetched one at a time and handed to the caller before the next
fetch, so memory stays flat whatever the result size. Values come back as
text, cut to ``max_value_chars`` (``None`` keeps them whole); SQL NULL is
returned as ``None``. Rows are keyed by the requested column names; when
those cannot line up with the result (``*``, or a different count) the
names reported by the cursor are used instead. Once exhausted the reader
stays exhausted: reading again means running the SELECT again.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Sequence, Type

from ..errors import ExecutionFailure, diagnostic_from
from ..logs import LogContext

logger = logging.getLogger(__name__)

MAX_VALUE_CHARS = 1024

Row = Dict[str, Optional[str]]


def to_text(value, max_chars: Optional[int] = MAX_VALUE_CHARS) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        text = bytes(value).decode("utf-8", errors="replace")
    else:
        text = str(value)
    if max_chars is not None and len(text) > max_chars:
        return text[:max_chars]
    return text


def _result_names(cursor, requested: List[str]) -> List[str]:
    desc = getattr(cursor, "description", None)
    if not desc:
        return requested
    if "*" in requested or len(desc) != len(requested):
        return [d[0] for d in desc]
    return requested


class ResultReader:
    def __init__(
        self,
        cursor,
        column_names: Sequence[str],
        max_value_chars: Optional[int] = MAX_VALUE_CHARS,
        error_type: Type[BaseException] = Exception,
        log: Optional[LogContext] = None,
    ):
        self.column_names = _result_names(cursor, list(column_names))
        self.max_value_chars = max_value_chars
        self.rows_read = 0
        self._cursor = cursor
        self._error_type = error_type
        self._log = log

    @property
    def exhausted(self) -> bool:
        return self._cursor is None

    def __iter__(self) -> Iterator[Row]:
        return self

    def __next__(self) -> Row:
        if self._cursor is None:
            raise StopIteration
        try:
            row = self._cursor.fetchone()
        except self._error_type as e:
            diag = diagnostic_from(e)
            self._write_log("ERROR", f"ExecutionFailure: {diag.state} {diag.message}")
            self.close()
            raise ExecutionFailure("Error fetching row.", diag) from e
        if row is None:
            self.close()
            raise StopIteration
        self.rows_read += 1
        return {
            name: to_text(value, self.max_value_chars)
            for name, value in zip(self.column_names, row)
        }

    def close(self) -> None:
        """Release the cursor. Safe to call more than once."""
        if self._cursor is None:
            return
        cur, self._cursor = self._cursor, None
        cur.close()
        self._write_log("OK")
        logger.debug("reader closed after %d rows", self.rows_read)

    def _write_log(self, result: str, err: Optional[str] = None) -> None:
        # one record per SELECT, written when the rows are done with
        if self._log is None:
            return
        log, self._log = self._log, None
        log.set_after({"rows": self.rows_read})
        log.write(result, err)

    def __enter__(self) -> "ResultReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

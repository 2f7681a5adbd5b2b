"""Build SQL text + bound values for the four record operations.

Nothing here touches a database, so the shape of every statement can be
checked on its own. Values are always bound through ``?`` placeholders, in
the same order as the column set. Table names, column names and condition
strings are pasted into the SQL verbatim: they must come from a trusted
source (the schema, or an operator), never from end-user input.
"""
from __future__ import annotations

from typing import Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple, Union


class ColumnValue(NamedTuple):
    name: str
    value: Optional[str]


ColumnSet = Sequence[ColumnValue]


class Statement(NamedTuple):
    sql: str
    params: Tuple[Optional[str], ...] = ()


def column_set(data: Union[Mapping[str, object], Iterable[Tuple[str, object]]]) -> List[ColumnValue]:
    """Normalize a dict or (name, value) pairs into an ordered column set.

    Order is preserved; values become text (the driver coerces them).
    """
    items = data.items() if isinstance(data, Mapping) else data
    out: List[ColumnValue] = []
    for name, value in items:
        out.append(ColumnValue(str(name), None if value is None else str(value)))
    return out


def _require_table(table: str) -> str:
    if not table or not table.strip():
        raise ValueError("table name is required")
    return table.strip()


def _require_columns(columns: Sequence, what: str) -> None:
    if not columns:
        raise ValueError(f"{what} needs at least one column")


def _where(condition: str) -> str:
    return f" WHERE {condition}" if condition else ""


def _require_condition(condition: str, allow_all: bool, what: str) -> None:
    if not condition and not allow_all:
        raise ValueError(f"{what} without a condition affects every row; pass allow_all=True to confirm")


def build_insert(table: str, columns: ColumnSet) -> Statement:
    table = _require_table(table)
    _require_columns(columns, "INSERT")
    names = ", ".join(c.name for c in columns)
    marks = ", ".join(["?"] * len(columns))
    return Statement(
        f"INSERT INTO {table} ({names}) VALUES ({marks})",
        tuple(c.value for c in columns),
    )


def build_update(table: str, columns: ColumnSet, condition: str, allow_all: bool = False) -> Statement:
    table = _require_table(table)
    _require_columns(columns, "UPDATE")
    _require_condition(condition, allow_all, "UPDATE")
    assigns = ", ".join(f"{c.name} = ?" for c in columns)
    return Statement(
        f"UPDATE {table} SET {assigns}{_where(condition)}",
        tuple(c.value for c in columns),
    )


def build_delete(table: str, condition: str, allow_all: bool = False) -> Statement:
    table = _require_table(table)
    _require_condition(condition, allow_all, "DELETE")
    return Statement(f"DELETE FROM {table}{_where(condition)}")


def build_select(table: str, column_names: Sequence[str], condition: str = "") -> Statement:
    table = _require_table(table)
    _require_columns(column_names, "SELECT")
    dupes = sorted({c for c in column_names if list(column_names).count(c) > 1})
    if dupes:
        raise ValueError(f"SELECT lists column(s) more than once: {', '.join(dupes)}")
    return Statement(f"SELECT {', '.join(column_names)} FROM {table}{_where(condition)}")

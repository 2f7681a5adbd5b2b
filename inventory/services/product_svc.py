# inventory/services/product_svc.py
from __future__ import annotations

from typing import Iterator

from ..db import Database
from ..repository.executor import ExecResult
from ..repository.statements import column_set
from . import record_svc

PRODUCT_TABLE = "Products"
PRODUCT_COLUMNS = ["ProductID", "ProductName", "Price"]


def add_product(db: Database, name: str, price) -> ExecResult:
    """Insert one product. Price must parse as a number; sign is not checked."""
    if not name or not name.strip():
        raise ValueError("product name is required")
    price_f = float(price)
    return record_svc.insert(db, PRODUCT_TABLE, column_set({"ProductName": name.strip(), "Price": price_f}))


def iter_products(db: Database, condition: str = "") -> Iterator[dict]:
    with record_svc.select(db, PRODUCT_TABLE, PRODUCT_COLUMNS, condition) as rows:
        for r in rows:
            yield r


def format_product(row: dict) -> str:
    price = row.get("Price")
    try:
        price_s = f"{float(price):.2f}" if price is not None else "-"
    except ValueError:
        price_s = str(price)
    return f"Product ID: {row.get('ProductID')}, Product Name: {row.get('ProductName')}, Price: ${price_s}"

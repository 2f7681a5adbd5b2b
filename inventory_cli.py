#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Inventory manager (generic record operations over SQLite)

Commands:
  init                Apply inventory/schema.sql to the configured database
  insert              INSERT one row:   insert Suppliers --set SupplierName=Vazha --set Address=Landiastr
  select              SELECT rows:      select Suppliers --columns SupplierID,SupplierName --where "1=1"
  update              UPDATE rows:      update Suppliers --set SupplierName=Mamuka --where "SupplierName = 'Vazha'"
  delete              DELETE rows:      delete Suppliers --where "SupplierID = '4'"
  add-product         Insert a product (name + price)
  list-products       Print every product

Notes:
- Values given with --set are always bound as parameters.
- --where text is placed into the SQL verbatim; only pass trusted conditions.
- update/delete refuse to run without --where unless --all is given.
- Any database failure prints the driver diagnostic and exits with status 1.
"""

import argparse
import sys

import yaml

from inventory.db import Database, init_schema
from inventory.errors import DataAccessError
from inventory.logs import setup_logging
from inventory.repository.statements import column_set
from inventory.services import product_svc, record_svc
from inventory.services.config_svc import get_config


# ---------------- helpers ----------------

def parse_assignments(items):
    """['A=1', 'B=x=y'] -> [('A', '1'), ('B', 'x=y')] (split on the first '=')."""
    pairs = []
    for it in items or []:
        name, sep, value = it.partition("=")
        if not sep or not name.strip():
            raise SystemExit(f"Bad --set value {it!r}; expected COLUMN=VALUE")
        pairs.append((name.strip(), value))
    return pairs


def parse_columns(text):
    cols = [c.strip() for c in (text or "").split(",") if c.strip()]
    if not cols:
        raise SystemExit("--columns needs at least one column name")
    return cols


def format_row(row):
    return ", ".join(f"{k}: {'NULL' if v is None else v}" for k, v in row.items())


# ---------------- Commands ----------------

def cmd_init(db, cfg, args):
    init_schema(db)
    print("Schema applied.")


def cmd_insert(db, cfg, args):
    res = record_svc.insert(db, args.table, column_set(parse_assignments(args.set)))
    print(f"Inserted {res.rowcount} row(s) into {args.table} (id={res.lastrowid}).")


def cmd_select(db, cfg, args):
    with record_svc.select(
        db, args.table, parse_columns(args.columns), args.where or "", max_value_chars=cfg["max_value_chars"]
    ) as rows:
        for row in rows:
            print(format_row(row))
        print(f"({rows.rows_read} row(s))")


def cmd_update(db, cfg, args):
    res = record_svc.update(db, args.table, column_set(parse_assignments(args.set)), args.where or "", allow_all=args.all)
    print(f"Updated {res.rowcount} row(s) in {args.table}.")


def cmd_delete(db, cfg, args):
    res = record_svc.delete(db, args.table, args.where or "", allow_all=args.all)
    print(f"Deleted {res.rowcount} row(s) from {args.table}.")


def cmd_add_product(db, cfg, args):
    product_svc.add_product(db, args.name, args.price)
    print("Product inserted successfully.")


def cmd_list_products(db, cfg, args):
    print("Current Products in Database:")
    for row in product_svc.iter_products(db):
        print(product_svc.format_product(row))


# ---------------- Entry ----------------

def build_parser():
    parser = argparse.ArgumentParser(description="Inventory manager (generic record operations)")
    parser.add_argument("--config", default=None, help="config.yaml path (default: project root)")
    parser.add_argument("--dsn", default=None, help="override the connection string")
    sub = parser.add_subparsers()

    p_init = sub.add_parser("init", help="apply schema")
    p_init.set_defaults(func=cmd_init)

    p_ins = sub.add_parser("insert", help="insert one row")
    p_ins.add_argument("table")
    p_ins.add_argument("--set", action="append", required=True, metavar="COL=VAL")
    p_ins.set_defaults(func=cmd_insert)

    p_sel = sub.add_parser("select", help="select rows")
    p_sel.add_argument("table")
    p_sel.add_argument("--columns", required=True, help="comma separated column names")
    p_sel.add_argument("--where", required=False, help="raw condition (trusted)")
    p_sel.set_defaults(func=cmd_select)

    p_upd = sub.add_parser("update", help="update rows")
    p_upd.add_argument("table")
    p_upd.add_argument("--set", action="append", required=True, metavar="COL=VAL")
    p_upd.add_argument("--where", required=False, help="raw condition (trusted)")
    p_upd.add_argument("--all", action="store_true", help="allow an update without --where")
    p_upd.set_defaults(func=cmd_update)

    p_del = sub.add_parser("delete", help="delete rows")
    p_del.add_argument("table")
    p_del.add_argument("--where", required=False, help="raw condition (trusted)")
    p_del.add_argument("--all", action="store_true", help="allow a delete without --where")
    p_del.set_defaults(func=cmd_delete)

    p_ap = sub.add_parser("add-product", help="insert a product")
    p_ap.add_argument("--name", required=True)
    p_ap.add_argument("--price", required=True)
    p_ap.set_defaults(func=cmd_add_product)

    p_lp = sub.add_parser("list-products", help="print all products")
    p_lp.set_defaults(func=cmd_list_products)
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    try:
        cfg = get_config(args.config)
        setup_logging(cfg["log_level"])
        dsn = args.dsn or cfg["connection_string"]
        with Database(dsn) as db:
            args.func(db, cfg, args)
    except DataAccessError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(1)
    except (ValueError, yaml.YAMLError) as e:
        raise SystemExit(f"Error: {e}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..db import get_conn
from ..errors import BindFailure, ConnectionFailure, DataAccessError, PrepareFailure
from ..logs import LogContext
from ..repository.statements import column_set
from ..services import record_svc
from ..services.config_svc import get_config

router = APIRouter()


class InsertBody(BaseModel):
    columns: Dict[str, Any]


class SelectBody(BaseModel):
    columns: List[str]
    condition: str = ""


class UpdateBody(BaseModel):
    columns: Dict[str, Any]
    condition: str
    allow_all: bool = False


class DeleteBody(BaseModel):
    condition: str
    allow_all: bool = False


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, (PrepareFailure, BindFailure, ValueError)):
        code = 400
    elif isinstance(e, ConnectionFailure):
        code = 503
    else:
        code = 409
    if isinstance(e, DataAccessError):
        detail = {"error": e.kind, "state": e.diagnostic.state, "message": e.diagnostic.message}
    else:
        detail = {"error": "ValueError", "message": str(e)}
    return HTTPException(status_code=code, detail=detail)


@router.post("/api/records/{table}/insert", status_code=201)
def api_records_insert(table: str, body: InsertBody):
    log = LogContext("API_INSERT")
    try:
        with get_conn() as db:
            res = record_svc.insert(db, table, column_set(body.columns), log=log)
        return {"message": "ok", "rowcount": res.rowcount, "lastrowid": res.lastrowid}
    except (DataAccessError, ValueError) as e:
        raise _http_error(e)


@router.post("/api/records/{table}/select")
def api_records_select(table: str, body: SelectBody):
    log = LogContext("API_SELECT")
    max_chars = get_config()["max_value_chars"]
    try:
        with get_conn() as db:
            with record_svc.select(db, table, body.columns, body.condition, max_value_chars=max_chars, log=log) as rows:
                items = list(rows)
        return {"total": len(items), "items": items}
    except (DataAccessError, ValueError) as e:
        raise _http_error(e)


@router.post("/api/records/{table}/update")
def api_records_update(table: str, body: UpdateBody):
    log = LogContext("API_UPDATE")
    try:
        with get_conn() as db:
            res = record_svc.update(db, table, column_set(body.columns), body.condition, allow_all=body.allow_all, log=log)
        return {"message": "ok", "rowcount": res.rowcount}
    except (DataAccessError, ValueError) as e:
        raise _http_error(e)


@router.post("/api/records/{table}/delete")
def api_records_delete(table: str, body: DeleteBody):
    log = LogContext("API_DELETE")
    try:
        with get_conn() as db:
            res = record_svc.delete(db, table, body.condition, allow_all=body.allow_all, log=log)
        return {"message": "ok", "rowcount": res.rowcount}
    except (DataAccessError, ValueError) as e:
        raise _http_error(e)

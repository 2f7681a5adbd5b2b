"""
FastAPI app entry point over the record operations.
Keep as `uvicorn inventory.api:app`.
"""
from __future__ import annotations

from fastapi import FastAPI

from . import APP_NAME, APP_VERSION
from .logs import setup_logging
from .services.config_svc import get_config

app = FastAPI(title=APP_NAME, version=APP_VERSION)


@app.on_event("startup")
def on_startup():
    setup_logging(get_config()["log_level"])


from .routes import base as base_routes
from .routes import records as records_routes

app.include_router(base_routes.router)
app.include_router(records_routes.router)

"""
Application factory for the costs HTTP API.

Every route lives under ``/costs``.  The factory accepts an explicit
session factory and clock so tests can run the app against an in-memory
database with a deterministic clock.
"""

from __future__ import annotations

import uuid

from fastapi import FastAPI, Request
from sqlalchemy.orm import Session, sessionmaker

import costs_kernel
from costs_api.errors import register_exception_handlers
from costs_api.routers import monthly_closing, monthly_overhead, monthly_salaries, projects
from costs_config import AppConfig, get_active_config
from costs_kernel.db.engine import get_session_factory, init_engine_from_url
from costs_kernel.domain.clock import Clock, SystemClock
from costs_kernel.logging_config import LogContext, configure_logging, get_logger

logger = get_logger("api.app")

API_PREFIX = "/costs"


def create_app(
    config: AppConfig | None = None,
    session_factory: sessionmaker[Session] | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    config = config or get_active_config()
    configure_logging(level=config.log_level)

    if session_factory is None:
        init_engine_from_url(config.database_url, echo=config.echo_sql)
        session_factory = get_session_factory()

    application = FastAPI(title="Month Closing & Cost Distribution", version=costs_kernel.__version__)
    application.state.config = config
    application.state.session_factory = session_factory
    application.state.clock = clock or SystemClock()

    @application.middleware("http")
    async def _request_id_mw(request: Request, call_next):
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = rid
        LogContext.set(correlation_id=rid)
        try:
            resp = await call_next(request)
        finally:
            LogContext.clear()
        resp.headers["X-Request-ID"] = rid
        return resp

    for module in (monthly_closing, monthly_salaries, monthly_overhead, projects):
        application.include_router(module.router, prefix=API_PREFIX)
    register_exception_handlers(application)

    logger.info("api_app_created", extra={"routes": len(application.routes)})
    return application

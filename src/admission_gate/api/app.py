"""
admission_gate.api.app

FastAPI app factory for the Admission Gate service.

Responsibilities:
- Build the FastAPI application and register routers/middleware in admission order.
- Construct the immutable policy table, threat detector and evaluator once per process.
- Initialize and dispose shared infrastructure (DB engine, session store).
- Render admission failures and unmatched routes as structured JSON.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse
from starlette.status import HTTP_404_NOT_FOUND

from admission_gate.admission.errors import AdmissionError
from admission_gate.admission.evaluator import SecurityEvaluator
from admission_gate.admission.middleware import AdmissionMiddleware
from admission_gate.admission.tiers import RolePolicyTable
from admission_gate.admission.translator import reject_error
from admission_gate.api.routers.auth import router as auth_router
from admission_gate.api.routers.health import router as health_router
from admission_gate.api.routers.index import router as index_router
from admission_gate.api.routers.users import router as users_router
from admission_gate.auth.session_cookie import SessionCookieConfig
from admission_gate.db.init_db import init_db
from admission_gate.db.session import create_engine, create_sessionmaker
from admission_gate.detection.local import LocalThreatDetector
from admission_gate.detection.protocol import ThreatDetector
from admission_gate.observability.logging import configure_logging, get_logger
from admission_gate.observability.middleware import RequestContextMiddleware
from admission_gate.sessions.store import SessionStore
from admission_gate.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings, detector: ThreatDetector | None = None) -> FastAPI:
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.env != "dev",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info(
            "startup",
            env=settings.env,
            detection_mode=settings.detection_mode,
            rate_limit_mode=settings.rate_limit_mode,
        )
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod should use Alembic migrations.
            await init_db(engine)
        app.state.session_store = SessionStore(
            session_factory=app.state.sessionmaker,
            ttl=timedelta(seconds=settings.session_ttl_seconds),
        )
        # Fails startup if the session table is unreachable.
        await app.state.session_store.purge_expired()
        log.info("session_store_connected")
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Admission Gate",
        version="0.1.0",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Process-wide, immutable after construction; shared by all in-flight requests.
    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.cookie_cfg = SessionCookieConfig.from_settings(settings)
    app.state.policy = RolePolicyTable.from_settings(settings)
    app.state.evaluator = SecurityEvaluator(
        detector=detector or LocalThreatDetector(),
        policy=app.state.policy,
        mode=settings.detection_mode,
        rate_limit_mode=settings.rate_limit_mode,
    )

    # Starlette runs the last-added middleware first: CORS -> request context -> admission.
    app.add_middleware(
        AdmissionMiddleware,
        health_path=settings.health_path,
        trust_forwarded_for=settings.trust_forwarded_for,
    )
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router, tags=["health"])
    app.include_router(index_router)
    app.include_router(auth_router)
    app.include_router(users_router)

    @app.exception_handler(AdmissionError)
    async def _admission_error(request: Request, exc: AdmissionError) -> JSONResponse:
        return reject_error(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            return JSONResponse(status_code=HTTP_404_NOT_FOUND, content={"error": "Route not found"})
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": _error_title(exc.status_code), "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    return app


def _error_title(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


# --- Module Notes -----------------------------------------------------------
# Tests pass a custom `detector` to exercise evaluator edge cases end-to-end without
# touching the reference heuristics in `detection.local`.

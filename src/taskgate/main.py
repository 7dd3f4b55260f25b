"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Settings, the database engine and the token codec are built
here once and stored on app.state; dependencies read them from there.
Nothing is a module-level global, so tests build one app per test.

Run with: uvicorn taskgate.main:create_app --factory
(or `taskgate serve`). Missing TASKGATE_DATABASE_URL or
TASKGATE_JWT_SECRET fails here, at startup.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from taskgate import __version__
from taskgate.api import api_router
from taskgate.auth.jwt import TokenCodec
from taskgate.config import Settings
from taskgate.db.engine import build_engine, build_session_factory, init_models
from taskgate.logging_setup import configure_logging
from taskgate.middleware.request_id import INTERNAL_ERROR

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: FastAPI lifespan replaces on_event("startup") / on_event("shutdown").
    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(
        "taskgate.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    if settings.create_tables:
        await init_models(app.state.engine)
        logger.info("taskgate.tables_ready")

    yield

    logger.info("taskgate.shutdown")
    await app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    if settings is None:
        settings = Settings()

    configure_logging(settings.log_level, json_logs=settings.log_json)

    app = FastAPI(
        title="taskgate",
        description="Multi-tenant task tracking behind a stateless token gate",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.token_codec = TokenCodec(settings.jwt_secret, settings.jwt_algorithm)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: Security → RequestId → handler
    # RequestId turns unhandled exceptions into the JSON 500, so Security
    # sits outside it and still decorates that response.

    from taskgate.middleware.request_id import RequestIdMiddleware
    from taskgate.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    _register_error_handlers(app)

    app.include_router(api_router)

    return app


def _register_error_handlers(app: FastAPI) -> None:
    """Map failures to the public error shape without leaking internals."""

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        # Locations only: the rejected input may be a password.
        fields = [".".join(str(part) for part in err["loc"]) for err in exc.errors()]
        logger.info("http.invalid_request", path=request.url.path, fields=fields)
        return JSONResponse(status_code=400, content={"detail": "Invalid request body"})

    @app.exception_handler(SQLAlchemyError)
    async def database_error(request: Request, exc: SQLAlchemyError):
        logger.error("http.database_error", path=request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=INTERNAL_ERROR)

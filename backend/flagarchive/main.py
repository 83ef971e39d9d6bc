"""
FlagArchive Backend: FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes app configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn flagarchive.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │ Req ID   │→│  Logging        │→│ GZip / CORS  │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │ /entities    │ │ /users   │ │ GET /health     │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Exception Handlers (the ONLY kind → status table): │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ bad_input→400 │ not_found→404 │ conflict→409 │   │
    │  │ internal→500  │ unexpected→500               │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create missing tables (DB_CREATE_TABLES)
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from flagarchive import __version__
from flagarchive.config import settings
from flagarchive.database import dispose_engine, init_models
from flagarchive.exceptions import ErrorKind, FlagArchiveError
from flagarchive.middleware.request_context import (
    AccessLogMiddleware,
    RequestIDMiddleware,
    request_id_var,
)
from flagarchive.routes import entities, health, users

logger = logging.getLogger(__name__)

# Transport status for each error kind. Nothing below the routes knows HTTP.
STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.BAD_INPUT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] flagarchive.services.entity_service: ...
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("FlagArchive Backend %s starting up...", __version__)

    if settings.db_create_tables:
        await init_models()
        logger.info("Database tables ensured")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("FlagArchive Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_validation_violations(exc: RequestValidationError):
    """Decoder errors as field violations; FastAPI's messages are kept verbatim."""
    violations = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        violations.append({"field": ".".join(loc) or "body", "message": error.get("msg", "")})
    return violations


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Every FlagArchiveError is rendered by one handler through STATUS_BY_KIND.
    Security: internal errors never expose their context; it is logged
    server-side instead.
    """

    @app.exception_handler(FlagArchiveError)
    async def handle_flagarchive_error(request: Request, exc: FlagArchiveError):
        rid = request_id_var.get("")
        content = {
            "error": exc.kind.value,
            "message": exc.message,
            "request_id": rid,
        }
        if exc.kind is ErrorKind.INTERNAL:
            logger.error("[%s] Internal error: %s | Context: %s", rid, exc.message, exc.context)
        else:
            content["details"] = jsonable_encoder(exc.context)
            if exc.kind is ErrorKind.BAD_INPUT:
                logger.warning("[%s] Bad input: %s", rid, exc.message)
        return JSONResponse(status_code=STATUS_BY_KIND[exc.kind], content=content)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Undecodable bodies and parameters are bad input too, not a 422."""
        rid = request_id_var.get("")
        logger.warning("[%s] Request decoding failed: %s", rid, exc.errors())
        return JSONResponse(
            status_code=STATUS_BY_KIND[ErrorKind.BAD_INPUT],
            content={
                "error": ErrorKind.BAD_INPUT.value,
                "message": "Request could not be decoded",
                "details": {"violations": _request_validation_violations(exc)},
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for truly unexpected errors.

        The stack trace is logged server-side ONLY (never in the response).
        """
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": ErrorKind.INTERNAL.value,
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="FlagArchive API",
        description="CRUD access to the flag archive's entities and users.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(entities.router)
    app.include_router(users.router)
    app.include_router(health.router)

    return app


# uvicorn expects `flagarchive.main:app` to be importable
app = create_app()

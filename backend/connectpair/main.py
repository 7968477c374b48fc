"""
ConnectPair Backend: FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the store and the notifier (or takes injected
       ones), registers middleware, exception handlers and routes, and wires
       the lifespan that opens and releases them.
Who:   uvicorn (`uvicorn connectpair.main:app`) or the `connectpair` script.

Application Architecture:
    ┌─────────────────────────────────────────────────────────────┐
    │                       FastAPI App                           │
    │                                                             │
    │  Middleware Chain:                                          │
    │  Rate Limit → Req ID → Logging → Security Headers → CORS    │
    │                                                             │
    │  Routes:                                                    │
    │  GET /health          POST /api/consultation                │
    │  POST /api/newsletter GET  /api/numbers/search              │
    │  GET  /api/admin/consultations  (unauthenticated)           │
    │                                                             │
    │  Exception Handlers:                                        │
    │  Validation→400 │ Database→500 │ 404 │ catch-all→500        │
    │                                                             │
    │  app.state: store (Store), notifier (Notifier)              │
    └─────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Report missing mail configuration (logged, not fatal)
    3. Create missing tables and check the connection
    Shutdown:
    1. Close the mail transport
    2. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from connectpair import __version__
from connectpair.config import Settings, settings as default_settings
from connectpair.database import Store
from connectpair.exceptions import ConnectPairError, DatabaseError, ValidationError
from connectpair.middleware.logging import RequestLoggingMiddleware
from connectpair.middleware.rate_limit import RateLimitMiddleware
from connectpair.middleware.request_id import RequestIDMiddleware, request_id_var
from connectpair.middleware.security_headers import SecurityHeadersMiddleware
from connectpair.routes import admin, consultations, health, newsletter, numbers
from connectpair.services.notification_service import Notifier
from connectpair.validation import violations_from_errors

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the store at startup, release notifier and store at shutdown.

    uvicorn runs the shutdown half on SIGINT/SIGTERM, so the database file is
    closed cleanly before the process exits.
    """
    app_settings: Settings = app.state.settings
    store: Store = app.state.store
    notifier: Notifier = app.state.notifier

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("ConnectPair backend starting up...")

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: forms still get stored, emails are logged as failures
        logger.error("Configuration error: %s", str(e))

    await store.create_schema()
    if await store.ping():
        logger.info("Database connection OK (%s)", store.engine.dialect.name)

    logger.info("Server running on port %d", app_settings.port)
    logger.info("Environment: %s", app_settings.environment)
    logger.warning("GET /api/admin/consultations is served WITHOUT authentication")

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Shutting down gracefully...")
    await notifier.close()
    await store.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the JSON envelopes the website understands.

    Handler hierarchy:
        ValidationError         → 400 {success:false, errors:[...]}
        RequestValidationError  → 400 {success:false, errors:[...]}
        DatabaseError           → 500 {success:false, message:"Database error"}
        ConnectPairError (base) → 500 generic
        HTTPException 404/405   → 404 {success:false, message:"Route not found"}
        Exception (fallback)    → 500 {success:false, message:"Something went wrong!"}

    Internal details (SQL errors, stack traces) are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation failed: %s", rid, exc.context.get("fields"))
        return JSONResponse(
            status_code=400,
            content={"success": False, "errors": exc.errors},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed JSON body or query parameters, same shape as field errors."""
        rid = request_id_var.get("")
        violations = violations_from_errors(exc.errors())
        logger.warning("[%s] Request rejected: %s", rid, [v.field for v in violations])
        return JSONResponse(
            status_code=400,
            content={"success": False, "errors": [v.to_dict() for v in violations]},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Database error"},
        )

    @app.exception_handler(ConnectPairError)
    async def handle_app_error(request: Request, exc: ConnectPairError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # An unknown method on a known path is still "no such route" to clients
        if exc.status_code in (404, 405):
            return JSONResponse(
                status_code=404,
                content={"success": False, "message": "Route not found"},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Something went wrong!"},
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    store: Optional[Store] = None,
    notifier: Optional[Notifier] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use (defaults to the environment singleton)
        store: Pre-built Store; one is built from DATABASE_URL when omitted
        notifier: Pre-built Notifier; an SMTP-backed one when omitted

    The store and notifier live on `app.state` for the app's whole lifetime
    and are reached by routes through FastAPI dependencies.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="ConnectPair API",
        description=(
            "Consultation and newsletter intake for the ConnectPair website. "
            "Note: /api/admin/* endpoints are unauthenticated."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.store = store or Store(
        app_settings.database_url,
        echo=app_settings.log_level == "DEBUG",
    )
    app.state.notifier = notifier or Notifier.from_settings(app_settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RateLimit → RequestID → Logging → Security → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=app_settings.is_production)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window,
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(consultations.router)
    app.include_router(numbers.router)
    app.include_router(newsletter.router)
    app.include_router(admin.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()


def run() -> None:
    """Console entry point: serve `app` on HOST:PORT."""
    uvicorn.run(
        "connectpair.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )

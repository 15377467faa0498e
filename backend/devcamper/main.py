"""
DevCamper API — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   `create_app()` builds settings, the database handle, the geocoder, the
       photo store and the token codec, stores them on `app.state`, and wires
       middleware, exception handlers and routers.
Who:   uvicorn imports `devcamper.main:app`; tests call `create_app()` with
       their own settings and collaborators.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware: RateLimit → RequestID → Logging → Headers   │
    │                                                          │
    │  Routes (/api/v1):                                       │
    │    bootcamps · courses · reviews · auth · users          │
    │  Routes (root): /uploads/{filename} · /health            │
    │                                                          │
    │  Error normalizer: every failure → {success:false, ...}  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → configuration check → upload directory
    Shutdown: close geocoder HTTP client → dispose database engine
"""

import logging
import secrets
import sys
import traceback
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from devcamper import __version__
from devcamper.auth.tokens import TokenCodec
from devcamper.config import Settings
from devcamper.database import Database
from devcamper.exceptions import (
    CircuitBreakerOpenError,
    DevCamperError,
    GeocoderError,
    RateLimitExceededError,
)
from devcamper.middleware import (
    RateLimitMiddleware,
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    request_id_var,
)
from devcamper.routes import auth, bootcamps, courses, health, reviews, uploads, users
from devcamper.services.common import is_unique_violation
from devcamper.services.file_service import PhotoStore
from devcamper.services.geocoder import Geocoder, MapQuestGeocoder

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went very wrong!"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once, at startup.

    Format: 2026-01-15T12:00:00 [INFO] devcamper.services.geocoder: message
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every operation at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("DevCamper API %s starting up (environment=%s)", __version__, settings.environment)

    # The server keeps running so health checks can report the problem
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    app.state.photo_store.ensure_directory()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("DevCamper API shutting down...")
    await app.state.geocoder.close()
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Error Normalizer
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    request: Request,
    status_code: int,
    message: str,
    exc: Exception,
    context: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """
    Build the uniform failure envelope.

    Development responses also carry the exception type/context and the
    formatted stack; other environments send `success` and `message` only.
    """
    content: Dict[str, Any] = {"success": False, "message": message}

    settings: Settings = request.app.state.settings
    if settings.is_development:
        content["error"] = {
            "type": type(exc).__name__,
            "statusCode": status_code,
            "context": context or {},
            "requestId": request_id_var.get(""),
        }
        content["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )

    return JSONResponse(
        status_code=status_code, content=jsonable_encoder(content), headers=headers
    )


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        loc = error.get("loc", ())
        if loc and loc[0] == "path":
            messages.append(f"Invalid {loc[-1] if len(loc) > 1 else 'id'}: {error.get('input')}")
            continue
        field = ".".join(str(part) for part in loc[1:]) or "body"
        messages.append(f"{field}: {error.get('msg')}")
    return ", ".join(messages) or "Invalid input data"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map every failure category to `{"success": false, "message": ...}`.

    Handler hierarchy:
        DevCamperError          → its own status (400/401/403/404/409/429/500/503)
        RequestValidationError  → 400 (malformed id, schema violation)
        IntegrityError          → 409 on unique violations, 400 otherwise
        HTTPException           → its status; unmatched routes get a 404 message
        Exception (fallback)    → 500, generic message outside development

    Details of server-side failures are logged, never sent to non-development
    clients.
    """

    @app.exception_handler(DevCamperError)
    async def handle_app_error(request: Request, exc: DevCamperError):
        rid = request_id_var.get("")
        headers: Dict[str, str] = {}
        if isinstance(exc, RateLimitExceededError):
            headers["Retry-After"] = str(exc.retry_after)
        elif isinstance(exc, CircuitBreakerOpenError):
            headers["Retry-After"] = str(exc.recovery_time)
        elif isinstance(exc, GeocoderError) and exc.retry_after:
            headers["Retry-After"] = str(exc.retry_after)

        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        settings: Settings = request.app.state.settings
        if exc.is_operational or settings.is_development:
            message = exc.message
        else:
            message = GENERIC_ERROR
        return _error_response(
            request, exc.status_code, message, exc, context=exc.context, headers=headers or None
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        logger.info("[%s] Validation error: %s", request_id_var.get(""), message)
        return _error_response(request, 400, message, exc)

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError):
        rid = request_id_var.get("")
        if is_unique_violation(exc):
            logger.info("[%s] Unique violation: %s", rid, exc.orig)
            return _error_response(request, 409, "Duplicate field value entered", exc)
        logger.warning("[%s] Integrity error: %s", rid, exc.orig)
        return _error_response(request, 400, "Invalid reference or constraint violation", exc)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = f"Can't find {request.url.path} on this server!"
        else:
            message = str(exc.detail)
        return _error_response(
            request, exc.status_code, message, exc, headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace goes to the log; the client sees it only in development."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        settings: Settings = request.app.state.settings
        message = str(exc) if settings.is_development else GENERIC_ERROR
        return _error_response(request, 500, message, exc)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    geocoder: Optional[Geocoder] = None,
    photo_store: Optional[PhotoStore] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Assemble the application.

    Any collaborator not passed in is built from `settings`; tests pass an
    in-memory database and a fake geocoder.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="DevCamper API",
        description=(
            "Bootcamp directory: bootcamps, courses, reviews and users with "
            "role-based access, radius search and filtered/paginated listings."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Application State ─────────────────────────────────────────────────
    app.state.settings = settings
    app.state.database = database or Database(settings)
    app.state.geocoder = geocoder or MapQuestGeocoder.from_settings(settings)
    app.state.photo_store = photo_store or PhotoStore.from_settings(settings)
    # Without a configured secret, tokens are signed with a per-process key
    # and stop verifying after a restart; startup logs the missing setting
    app.state.token_codec = TokenCodec(
        settings.jwt_secret or secrets.token_urlsafe(32),
        settings.jwt_expire_minutes,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RateLimit → RequestID → Logging → Headers → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        SecurityHeadersMiddleware, hsts=settings.environment == "production"
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_requests,
        window=settings.rate_limit_window,
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(bootcamps.router)
    app.include_router(courses.router)
    app.include_router(reviews.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(uploads.router)
    app.include_router(health.router)

    return app


# uvicorn devcamper.main:app
app = create_app()

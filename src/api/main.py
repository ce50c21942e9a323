"""Specflow HTTP application.

``create_app()`` builds a configured FastAPI instance; ``app`` is
created lazily on first attribute access so importing this module
never opens a database connection.

Every error leaves the API in one envelope::

    {"error": {"code": 404, "message": "...", "type": "notfound_error",
               "correlation_id": "..."}}
"""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from src import __version__
from src.api.rate_limit import MAX_REQUEST_BODY_BYTES, limiter
from src.api.routes import api_router
from src.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    SpecflowError,
    ValidationError,
)
from src.settings import Settings, get_settings
from src.storage import close_db, init_db

CORRELATION_HEADER = "X-Correlation-ID"

# Checked in order; anything else is a 500
_ERROR_STATUS: tuple[tuple[type[SpecflowError], int], ...] = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (InvalidTransitionError, 409),
)

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=(), payment=(), usb=()",
}

_STAGING_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:8080",
]

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

_app: FastAPI | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Check the database on startup (outside tests), dispose it on shutdown."""
    if get_settings().environment != "testing":
        await init_db()
    yield
    await close_db()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application: middleware, routes under ``/api``, error handlers.

    API docs are only served in debug mode.
    """
    settings = settings or get_settings()
    open_cors = settings.environment in ("development", "testing")

    app = FastAPI(
        title="Specflow",
        description="Spec-driven document generation through a pipeline of LLM agents",
        version=__version__,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
        openapi_url="/api/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_get_allowed_origins(settings),
        allow_credentials=True,
        allow_methods=["*"] if open_cors else ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"] if open_cors else ["Content-Type", CORRELATION_HEADER],
        expose_headers=[CORRELATION_HEADER, "X-Parse-Status", "Content-Disposition"],
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    # Enforces the limiter default on undecorated routes
    app.add_middleware(SlowAPIMiddleware)

    app.middleware("http")(_body_size_limit_middleware)
    app.middleware("http")(_security_headers_middleware)
    app.middleware("http")(_correlation_middleware)

    # Imported here: the middleware module looks up get_correlation_id in this one
    from src.api.middleware import RequestTracingMiddleware

    app.add_middleware(RequestTracingMiddleware)

    app.include_router(api_router, prefix="/api")
    _register_exception_handlers(app)

    return app


def _get_allowed_origins(settings: Settings) -> list[str]:
    """CORS origins: ALLOWED_ORIGINS if set, else a per-environment default.

    Production defaults to same-origin only.
    """
    if settings.allowed_origins:
        return [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
    if settings.environment in ("development", "testing"):
        return ["*"]
    if settings.environment == "staging":
        return list(_STAGING_ORIGINS)
    return []


def _error_response(
    status_code: int,
    message: Any,
    error_type: str,
    correlation_id: str | None = None,
) -> JSONResponse:
    body: dict[str, Any] = {"code": status_code, "message": message, "type": error_type}
    headers = None
    if correlation_id:
        body["correlation_id"] = correlation_id
        headers = {CORRELATION_HEADER: correlation_id}
    return JSONResponse(status_code=status_code, content={"error": body}, headers=headers)


async def _body_size_limit_middleware(request: Request, call_next):
    """413 for a declared Content-Length above MAX_REQUEST_BODY_BYTES."""
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > MAX_REQUEST_BODY_BYTES:
        return _error_response(
            413,
            f"Request body too large. Maximum size is {MAX_REQUEST_BODY_BYTES} bytes.",
            "request_too_large",
        )
    return await call_next(request)


async def _security_headers_middleware(request: Request, call_next):
    response = await call_next(request)
    response.headers.update(_SECURITY_HEADERS)
    if get_settings().environment in ("production", "staging"):
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    if request.url.path.startswith("/api/"):
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
    return response


async def _correlation_middleware(request: Request, call_next):
    """Adopt the caller's X-Correlation-ID or mint one, and echo it back."""
    correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
    _correlation_id.set(correlation_id)
    response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response


def get_correlation_id() -> str | None:
    """Correlation ID of the request being handled, if any."""
    return _correlation_id.get()


def _status_for(exc: SpecflowError) -> int:
    """HTTP status for an application error."""
    for error_cls, status_code in _ERROR_STATUS:
        if isinstance(exc, error_cls):
            return status_code
    return 500


def _register_exception_handlers(app: FastAPI) -> None:
    logger = structlog.get_logger()

    @app.exception_handler(SpecflowError)
    async def specflow_error_handler(request: Request, exc: SpecflowError) -> JSONResponse:
        correlation_id = get_correlation_id() or exc.correlation_id
        error_type = exc.__class__.__name__.replace("Error", "_error").lower()
        status_code = _status_for(exc)

        if status_code >= 500:
            logger.error(
                "specflow_error",
                error_type=error_type,
                correlation_id=correlation_id,
                exc_info=exc,
            )
        else:
            logger.info(
                "specflow_client_error",
                error_type=error_type,
                status=status_code,
                correlation_id=correlation_id,
            )

        # Server-side detail only leaves the process in debug mode
        if status_code < 500 or get_settings().debug:
            message = str(exc)
        else:
            message = f"An error occurred. Correlation ID: {correlation_id}"
        return _error_response(status_code, message, error_type, correlation_id)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        correlation_id = get_correlation_id() or str(uuid.uuid4())
        return _error_response(exc.status_code, exc.detail, "http_error", correlation_id)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        correlation_id = get_correlation_id() or str(uuid.uuid4())
        logger.exception("unhandled_exception", correlation_id=correlation_id, exc_info=exc)
        message = str(exc) if get_settings().debug else "Internal server error"
        return _error_response(500, message, "internal_error", correlation_id)


def get_app() -> FastAPI:
    """The process-wide application, created on first call."""
    global _app
    if _app is None:
        _app = create_app()
    return _app


def __getattr__(name: str) -> Any:
    # ``uvicorn src.api.main:app`` resolves through here
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

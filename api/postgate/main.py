"""
Postgate API - accounts, posts, and bearer-token authentication.

FastAPI application factory. The routers are a thin layer: they parse
requests, call the services, and map service errors to HTTP responses.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from postgate.auth.password import CredentialHasher
from postgate.auth.tokens import Clock, TokenService
from postgate.config import Settings, get_settings, validate_security_settings
from postgate.database import Database
from postgate.errors import (
    AuthError,
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from postgate.logging_config import configure_logging
from postgate.migrations import migrate_db
from postgate.routers.accounts import router as accounts_router
from postgate.routers.auth import router as auth_router
from postgate.routers.posts import router as posts_router

logger = logging.getLogger("postgate.api")

ERROR_STATUS: dict[type[ServiceError], int] = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ConflictError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidCredentialsError: status.HTTP_401_UNAUTHORIZED,
    AuthError: status.HTTP_401_UNAUTHORIZED,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    settings: Settings = app.state.settings
    logger.info("Postgate API starting up (%s)", settings.environment)
    if settings.migrate_on_startup:
        applied = await migrate_db(settings.database_url)
        logger.info("Startup migrations applied: %d", len(applied))
    yield
    await app.state.database.dispose()
    logger.info("Postgate API shut down")


def create_app(settings: Settings | None = None, clock: Clock | None = None) -> FastAPI:
    """Build the application and the process-wide components it shares across requests."""
    settings = settings or get_settings()
    validate_security_settings(settings)
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Postgate API",
        description="Accounts, posts, and bearer-token authentication",
        version="0.1.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = Database(settings.database_url, echo=settings.database_echo)
    app.state.hasher = CredentialHasher(rounds=settings.bcrypt_rounds)
    app.state.token_service = TokenService(
        settings.jwt_secret,
        ttl_seconds=settings.access_token_expire_seconds,
        algorithm=settings.jwt_algorithm,
        clock=clock,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(accounts_router)
    app.include_router(posts_router)

    app.middleware("http")(add_request_id)
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.add_api_route("/api/v1/health", health_check, methods=["GET"], tags=["System"])

    return app


# --- Middleware ---


async def add_request_id(request: Request, call_next):
    """Add a unique request ID to each request."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# --- Exception Handlers ---


def _error_body(code: str, message: str, request: Request, **extra: Any) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "request_id": getattr(request.state, "request_id", None),
            **extra,
        }
    }


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Map a typed service error to its HTTP status."""
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        status.HTTP_400_BAD_REQUEST,
    )
    headers = None
    extra: dict[str, Any] = {}
    if isinstance(exc, AuthError):
        headers = {"WWW-Authenticate": "Bearer"}
        extra["reason"] = exc.reason.value
    return JSONResponse(
        status_code=status_code,
        content=_error_body(exc.code, exc.message, request, **extra),
        headers=headers,
    )


def _sanitize_error_detail(error: dict[str, Any]) -> dict[str, Any]:
    """Sanitize Pydantic error detail to be JSON-serializable."""
    sanitized = {}
    for key, value in error.items():
        if key == "ctx":
            # Context may contain non-serializable objects like ValueError
            sanitized[key] = {k: str(v) for k, v in value.items()} if isinstance(value, dict) else str(value)
        elif key == "loc":
            sanitized[key] = [str(loc) for loc in value]
        elif key == "input":
            # Never echo submitted passwords back
            continue
        else:
            sanitized[key] = value
    return sanitized


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors with consistent error format."""
    errors = [_sanitize_error_detail(e) for e in exc.errors()]
    if errors:
        first_error = errors[0]
        field = ".".join(str(loc) for loc in first_error.get("loc", []))
        msg = first_error.get("msg", "Validation error")
        message = f"{field}: {msg}" if field else msg
    else:
        message = "Validation error"

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body("VALIDATION_ERROR", message, request, details=errors),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent error format."""
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("INTERNAL_ERROR", "An unexpected error occurred", request),
    )


# --- Health Check ---


async def health_check() -> dict[str, str]:
    """
    Health check endpoint.

    Returns 200 OK if the API is running.
    """
    return {"status": "healthy"}


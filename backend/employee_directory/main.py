"""
Employee Directory Backend - FastAPI Application Factory
==========================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes logging setup, middleware registration, route mounting,
       exception handling and the database lifecycle in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (employee_directory.main:app) and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │ Sec. Headers │→│ Req ID   │→│  Logging        │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────────────────┐ ┌────────────────────┐  │
    │  │ /api/employees (CRUD)  │ │ GET /health        │  │
    │  └────────────────────────┘ └────────────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ Dup→409 │ 500 │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  setup logging → create schema (CREATE TABLE IF NOT EXISTS)
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from employee_directory import __version__
from employee_directory.config import settings
from employee_directory.database import Database
from employee_directory.exceptions import (
    DatabaseError,
    DuplicateEmailError,
    EmployeeDirectoryError,
    EmptyUpdateError,
    NotFoundError,
    UniqueConstraintViolation,
    ValidationError,
)
from employee_directory.middleware.logging import RequestLoggingMiddleware
from employee_directory.middleware.request_id import RequestIDMiddleware, request_id_var
from employee_directory.middleware.security_headers import SecurityHeadersMiddleware
from employee_directory.routes import employees, health

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] employee_directory.access: GET /api/employees ...
    Called once during app startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access log replaces uvicorn's; SQL echo is controlled by DB_ECHO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    if not settings.sql_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, then the idempotent schema bootstrap.
    Shutdown: close every pooled database connection.
    """
    setup_logging()
    database: Database = app.state.database
    logger.info("Employee Directory backend starting (env=%s)", settings.environment)

    await database.create_schema()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/api/docs", settings.backend_host, settings.backend_port)

    yield

    logger.info("Employee Directory backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: Optional[Any] = None,
) -> JSONResponse:
    """Build the {success: false, error, message, ...} envelope."""
    content = {
        "success": False,
        "error": error,
        "message": message,
        "request_id": _request_id(request),
    }
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _describe_validation_error(err: dict) -> str:
    """One readable sentence for a single pydantic/FastAPI error entry."""
    loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc) or "request"
    if err.get("type") == "missing":
        return f"{field.capitalize()} is required"
    if loc == ["employee_id"]:
        return "Employee ID must be a number"
    ctx_error = (err.get("ctx") or {}).get("error")
    if ctx_error is not None:
        # Our field validators raise ValueError with a user-facing message
        return str(ctx_error)
    return f"{field}: {err.get('msg', 'invalid value')}"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the error envelope.

    Handler hierarchy:
        RequestValidationError     → 400 validation_error
        EmptyUpdateError           → 400 empty_update
        ValidationError            → 400 validation_error
        NotFoundError              → 404 not_found
        DuplicateEmailError        → 409 duplicate_email
        UniqueConstraintViolation  → 409 duplicate_email
        DatabaseError              → 500 server_error (generic message)
        EmployeeDirectoryError     → 500 server_error
        HTTPException              → its own status (e.g. unknown route → 404)
        Exception                  → 500 internal_server_error

    Internal details (driver errors, SQL) are logged, never returned.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        details = [
            {"field": ".".join(str(p) for p in e.get("loc", ())), "message": _describe_validation_error(e)}
            for e in errors
        ]
        message = details[0]["message"] if details else "Invalid request"
        logger.warning("[%s] Request validation failed: %s", _request_id(request), message)
        return error_response(request, 400, "validation_error", message, details)

    @app.exception_handler(EmptyUpdateError)
    async def handle_empty_update(request: Request, exc: EmptyUpdateError):
        return error_response(request, 400, "empty_update", exc.message)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", _request_id(request), exc.message)
        return error_response(request, 400, "validation_error", exc.message, exc.context or None)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(request, 404, "not_found", exc.message)

    @app.exception_handler(DuplicateEmailError)
    async def handle_duplicate_email(request: Request, exc: DuplicateEmailError):
        return error_response(request, 409, "duplicate_email", exc.message)

    @app.exception_handler(UniqueConstraintViolation)
    async def handle_unique_violation(request: Request, exc: UniqueConstraintViolation):
        logger.warning("[%s] Unique constraint violated: %s", _request_id(request), exc.context)
        return error_response(request, 409, "duplicate_email", "An employee with this email already exists")

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", _request_id(request), exc.message, exc.context)
        return error_response(
            request, 500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(EmployeeDirectoryError)
    async def handle_app_error(request: Request, exc: EmployeeDirectoryError):
        logger.error("[%s] Application error: %s | Context: %s", _request_id(request), exc.message, exc.context)
        return error_response(request, 500, "server_error", exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(
                request, 404, "not_found", "Route not found", {"path": request.url.path}
            )
        return error_response(request, exc.status_code, "http_error", str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: stack trace goes to the log only."""
        logger.error("[%s] Unexpected error: %s", _request_id(request), str(exc), exc_info=True)
        return error_response(
            request,
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: Storage handle to use. Defaults to one built from settings;
                  tests pass an in-memory database.

    Returns:
        Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Employee Management System API",
        description=(
            "Create, read, update, delete and search employees. "
            "List responses support substring search, position filtering and "
            "limit/offset pagination."
        ),
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )
    app.state.database = database or Database.from_settings(settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: SecurityHeaders → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(app)

    app.include_router(employees.router)
    app.include_router(health.router)

    return app


def serve() -> None:
    """Console entry point: run the API with uvicorn using the configured host/port."""
    uvicorn.run(
        "employee_directory.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


# uvicorn expects `employee_directory.main:app` to be importable
app = create_app()

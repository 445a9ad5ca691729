"""
CatAPI Backend — FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers.
Who:   uvicorn loads `catapi.main:app`.

Application Architecture:
    Middleware (outermost first):
        RequestID → RequestLogging → GZip → CORS

    Routes:
        /api/v1/cats      /api/v1/users     /api/v1/auth/login
        /api/v1/uploads   /health

    Exception Handlers:
        CatApiError               → exc.status_code, exc.error_code
        RequestValidationError    → 400, "<msg>: <field>, ..."
        Exception (fallback)      → 500

Error body:
    {"error": "...", "message": "...", "stack": "...", "request_id": "..."}
    `stack` is only included when ENVIRONMENT is not production.
"""

import logging
import sys
import traceback
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from catapi import __version__
from catapi.config import settings
from catapi.database import dispose_engine
from catapi.exceptions import CatApiError, format_field_errors
from catapi.middleware.logging import RequestLoggingMiddleware
from catapi.middleware.request_id import RequestIDMiddleware, request_id_var
from catapi.routes import auth, cats, health, uploads, users
from catapi.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output goes to stdout, where the container runtime collects it.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, configuration check, storage directory.
    Shutdown: dispose the database engine.
    """
    setup_logging()
    logger.info("CatAPI Backend %s starting up (environment=%s)", __version__, settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("CatAPI Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _stack(exc: BaseException) -> Optional[str]:
    if settings.is_production:
        return None
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def error_response(status_code: int, error: str, message: str, exc: BaseException) -> JSONResponse:
    body = ErrorResponse(
        error=error,
        message=message,
        stack=_stack(exc),
        request_id=request_id_var.get("") or None,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the JSON error body.

    The status code and error code come from the exception class, so every
    CatApiError subclass is covered by one handler. Context is logged,
    never returned.
    """

    @app.exception_handler(CatApiError)
    async def handle_app_error(request: Request, exc: CatApiError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return error_response(exc.status_code, exc.error_code, exc.message, exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = format_field_errors(exc.errors())
        logger.info("[%s] Request validation failed: %s", request_id_var.get(""), message)
        return error_response(400, "validation_error", message, exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return error_response(
            500,
            "internal_error",
            "An unexpected error occurred. Please try again or contact support.",
            exc,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="CatAPI",
        description=(
            "CRUD API for cats and their owners: uploads, geocoded locations, "
            "bounding-box search and owner/admin authorization."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware runs in reverse order of addition
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(cats.router)
    app.include_router(users.router)
    app.include_router(auth.router)
    app.include_router(uploads.router)
    app.include_router(health.router)

    return app


app = create_app()

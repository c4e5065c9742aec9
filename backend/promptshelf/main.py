"""
PromptShelf Backend: FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance;
       `app` is the module-level instance uvicorn serves.
Who:   uvicorn (`uvicorn promptshelf.main:app` or the `promptshelf` script).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────┐ ┌─────────────────┐  │
    │  │  Req ID  │→│  Access Log │→│      CORS       │  │
    │  └──────────┘ └─────────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────┐ ┌────────────────┐ ┌───────┐ │
    │  │ POST /api/prompts│ │GET /api/prompts│ │/health│ │
    │  └──────────────────┘ └────────────────┘ └───────┘ │
    │                                                     │
    │  Exception Handlers → {"error": <message>}:         │
    │  Auth→401 │ Validation→400 │ Upstream/Storage→500  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Validate configuration (problems are logged)
    3. Connect to the database; failure aborts startup
    4. Open the GitHub HTTP client

    Shutdown:
    1. Close the GitHub HTTP client
    2. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from promptshelf import __version__
from promptshelf.config import settings
from promptshelf.database import Database, describe_url
from promptshelf.exceptions import (
    AuthError,
    PayloadTooLargeError,
    PromptShelfError,
    StorageError,
    UpstreamError,
    ValidationError,
)
from promptshelf.middleware.logging import RequestLoggingMiddleware
from promptshelf.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from promptshelf.repositories.prompt_store import PromptStore
from promptshelf.routes import health, prompts
from promptshelf.services.image_uploader import GitHubImageUploader

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "Server error"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (captured by Docker / systemd)
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-operation chatter from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build the process-wide resources before serving and release them after.

    app.state after startup:
        database        Database (engine + session factory)
        prompt_store    PromptStore over `database`
        image_uploader  GitHubImageUploader with an open httpx.AsyncClient

    A database that cannot be reached raises out of this function, which makes
    uvicorn abort startup: the server never accepts connections.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("PromptShelf %s starting up...", __version__)

    try:
        settings.validate_required()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    database = Database.from_settings(settings)
    try:
        await database.connect(create_schema=settings.db_auto_create_schema)
    except StorageError as e:
        logger.critical(
            "Database unavailable at %s: %s | Context: %s",
            describe_url(settings.database_url),
            e.message,
            e.context,
        )
        await database.dispose()
        raise

    uploader = GitHubImageUploader.from_settings(settings)

    app.state.database = database
    app.state.prompt_store = PromptStore(database)
    app.state.image_uploader = uploader

    logger.info("Images go to github.com/%s", settings.github_repo or "<unset>")
    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    try:
        yield
    finally:
        # ── Shutdown ──────────────────────────────────────────────────────
        logger.info("PromptShelf shutting down...")
        await uploader.aclose()
        await database.dispose()
        logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the uniform error body.

    Handler hierarchy:
        AuthError               → 401 {"error": "Unauthorized"}
        ValidationError         → 400 {"error": <message>}
        PayloadTooLargeError    → 413 {"error": "Payload too large"}
        UpstreamError           → 500 {"error": "Server error"}
        StorageError            → 500 {"error": "Server error"}
        PromptShelfError (base) → 500 {"error": "Server error"}
        HTTPException (routing) → its status, {"error": <detail>}
        Exception (fallback)    → 500 {"error": "Server error"}

    500 responses never carry details; those are logged with the request ID.
    """

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        return _error(401, exc.message)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s | Context: %s", rid, exc.message, exc.context)
        return _error(400, exc.message)

    @app.exception_handler(PayloadTooLargeError)
    async def handle_payload_too_large(request: Request, exc: PayloadTooLargeError):
        rid = request_id_var.get("")
        logger.warning("[%s] Body rejected: %s", rid, exc.context)
        return _error(413, exc.message)

    @app.exception_handler(UpstreamError)
    async def handle_upstream_error(request: Request, exc: UpstreamError):
        rid = request_id_var.get("")
        logger.error("[%s] Upstream error: %s | Context: %s", rid, exc.message, exc.context)
        return _error(500, GENERIC_SERVER_ERROR)

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        rid = request_id_var.get("")
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return _error(500, GENERIC_SERVER_ERROR)

    @app.exception_handler(PromptShelfError)
    async def handle_app_error(request: Request, exc: PromptShelfError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return _error(exc.status_code, exc.message if exc.status_code < 500 else GENERIC_SERVER_ERROR)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: the stack trace is logged, the client gets the generic body."""
        # Runs outside the middleware chain, after request_id_var was reset
        rid = getattr(request.state, "request_id", "")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _error(500, GENERIC_SERVER_ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: FastAPI instance with middleware, exception handlers and routes.
    Resources (database, GitHub client) are attached by `lifespan` at startup.
    """
    app = FastAPI(
        title="PromptShelf API",
        description=(
            "Stores creative prompts with tags and an image. Images are committed "
            "to a GitHub repository; records live in the database."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(prompts.router)
    app.include_router(health.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve `app` on HOST:PORT (PORT defaults to 5000)."""
    uvicorn.run(
        "promptshelf.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()

"""FastAPI application entry point.

Persona Forum API - personas, posts and threaded comments.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from forum.routes import api_router
from forum.services.errors import ForumError
from forum.settings import get_settings
from forum.stores.postgres import close_db, create_tables, init_db, ping_db
from forum.stores.redis import close_redis, init_redis

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Connects the configured storage backend on startup and releases it on
    shutdown.
    """
    settings = get_settings()

    if settings.storage_backend == "redis":
        await init_redis()
    else:
        await init_db()
        await ping_db()
        logger.info("Database connected")
        if settings.create_tables_on_startup:
            await create_tables()

    yield

    await close_redis()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Forum of personas, posts and threaded comments",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ForumError)
    async def forum_error_handler(request: Request, exc: ForumError) -> JSONResponse:
        """Client errors: {"error": CODE} with the error's status."""
        return JSONResponse(status_code=exc.status_code, content={"error": exc.code})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed JSON, wrong field types or non-numeric path ids."""
        logger.debug(f"Rejected request to {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": "INVALID_REQUEST"})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Anything unexpected (usually storage failures) is a generic 500."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        content: dict[str, str] = {"error": "SERVER_ERROR"}
        if settings.debug:
            content["message"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Health check endpoint."""
        return {"ok": True}

    # Include API routes
    app.include_router(api_router)

    # Frontend bundle, mounted last so /api and /health win
    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "forum.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )

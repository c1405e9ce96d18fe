"""FastAPI application entry point.

Store Ratings API - users rate stores, store owners read their ratings,
administrators manage users and stores.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ratings_api.routes import api_router
from ratings_api.schemas import ErrorResponse
from ratings_api.settings import get_settings
from ratings_api.stores.postgres import close_db, create_tables, init_db, ping_db
from ratings_api.stores.redis import close_redis, init_redis

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    settings = get_settings()

    # Initialize database (skip in tests if no DB available)
    try:
        await init_db()
        await ping_db()
        logger.info("Postgres connected")
        if settings.auto_create_tables:
            await create_tables()
            logger.info("Database tables ensured")
    except Exception:
        logger.exception("Postgres init failed")

    # Initialize Redis (skip in tests if no Redis available)
    try:
        await init_redis()
    except Exception:
        logger.exception("Redis init failed")

    yield

    # Shutdown
    await close_redis()
    await close_db()


def _field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    """Flatten Pydantic errors into {field: [message, ...]} keyed by wire name."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = loc[-1] if loc else "body"
        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, []).append(message)
    return errors


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Role-based store rating API",
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
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def log_api_requests(request: Request, call_next):
        """Log one line per /api request: METHOD path status in Nms."""
        start = time.perf_counter()
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "%s %s %s in %.0fms",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
            )
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Render HTTP errors as {"message": ...}."""
        if isinstance(exc.detail, dict):
            content = exc.detail
        else:
            content = {"message": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Validation errors are 400 with per-field messages."""
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(message="Validation error", errors=_field_errors(exc)).model_dump(),
        )

    # Exception handler for structured error format
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"message": str(exc) if settings.debug else "Internal server error"},
        )

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Health check endpoint."""
        return {"ok": True}

    # Include API routes
    app.include_router(api_router)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "ratings_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )

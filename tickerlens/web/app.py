"""
FastAPI application factory and configuration.
"""

import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from tickerlens import __version__
from tickerlens.core.config import ConfigManager, TickerLensConfig
from tickerlens.core.exceptions import TickerLensError
from tickerlens.core.logging import configure_logging, log_context
from tickerlens.web.models import ErrorResponse
from tickerlens.web.routes import analysis_router, health_router, metrics_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifecycle."""
    logger.info("tickerlens web service starting", extra={"version": __version__})
    yield
    logger.info("tickerlens web service stopped")


def create_app(config: TickerLensConfig | None = None) -> FastAPI:
    """Create the FastAPI application instance."""
    resolved = config or ConfigManager().get_config()
    configure_logging(
        resolved.logging.level,
        file_output=resolved.logging.file is not None,
        file_path=resolved.logging.file,
    )

    app = FastAPI(
        title="tickerlens",
        description="Multi-source stock data aggregation with confidence scoring and quality assessment",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.config = resolved
    app.state.started_at = time.monotonic()

    _setup_middleware(app)
    _setup_routes(app)
    _setup_exception_handlers(app)

    return app


def _setup_middleware(app: FastAPI) -> None:
    """Configure middleware."""

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    @app.middleware("http")
    async def trace_requests(request: Request, call_next):  # type: ignore[no-untyped-def]
        trace_id = request.headers.get("x-trace-id") or uuid.uuid4().hex
        with log_context(trace_id=trace_id, path=request.url.path):
            request.state.trace_id = trace_id
            response = await call_next(request)
        response.headers["x-trace-id"] = trace_id
        return response


def _setup_routes(app: FastAPI) -> None:
    """Register routers."""
    app.include_router(analysis_router, prefix="/api/v1/analysis", tags=["analysis"])
    app.include_router(health_router, prefix="/api/v1", tags=["health"])
    app.include_router(metrics_router)


def _request_id(request: Request) -> str:
    return getattr(request.state, "trace_id", None) or uuid.uuid4().hex


def _setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers."""

    @app.exception_handler(TickerLensError)
    async def tickerlens_exception_handler(request: Request, exc: TickerLensError) -> JSONResponse:
        """Map domain exceptions to 400 responses."""
        logger.bind(error_code=exc.error_code).warning(
            "Request rejected", extra={"path": request.url.path, "error_message": exc.message}
        )
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(
                error=exc.__class__.__name__,
                message=exc.message,
                details={"error_code": exc.error_code, "context": exc.details},
                request_id=_request_id(request),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error="HTTPException",
                message=str(exc.detail),
                details={"status_code": exc.status_code},
                request_id=_request_id(request),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle uncaught exceptions."""
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="InternalServerError",
                message="internal server error",
                details={"type": type(exc).__name__},
                request_id=_request_id(request),
            ).model_dump(mode="json"),
        )

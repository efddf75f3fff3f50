"""
AI Engine main application.
Portfolio optimization, risk metrics and market analysis over HTTP.
"""
# Standard library imports
import logging
from contextlib import asynccontextmanager
from typing import Optional

# Third-party imports
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Local application imports
from shared.config import settings
from shared.sentry_init import init_sentry
from shared.background_tasks import DataCollector
from shared.data_providers import CoinGeckoPriceProvider, DefiLlamaYieldProvider
from shared.error_models import (
    AIEngineError,
    ErrorCode,
    create_error_response,
    error_response_from_exception,
)
from shared.performance_monitor import PerformanceMonitor
from .middleware import RequestProcessingMiddleware
from .routes import router
from .service import AIEngineService

logger = logging.getLogger(__name__)

# Initialize Sentry
init_sentry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    Starts the data collector before serving and stops it on shutdown.
    """
    collector: DataCollector = app.state.collector
    await collector.start()

    yield

    await collector.close()


async def ai_engine_error_handler(request: Request, exc: AIEngineError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    error_response, status = error_response_from_exception(exc)
    return JSONResponse(status_code=status, content=error_response.model_dump(mode="json"))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        error_code, message = ErrorCode.METHOD_NOT_ALLOWED, "Method not allowed"
    elif exc.status_code == 404:
        error_code, message = ErrorCode.NOT_FOUND, "Not found"
    else:
        error_code, message = ErrorCode.INVALID_INPUT, str(exc.detail)

    error_response, status = create_error_response(error_code, message, status_code=exc.status_code)
    return JSONResponse(
        status_code=status,
        content=error_response.model_dump(mode="json"),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    field = None
    detail = None
    if errors:
        field = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "query")
        detail = errors[0].get("msg")

    error_response, status = create_error_response(
        ErrorCode.INVALID_INPUT,
        "Invalid request parameters",
        detail=detail,
        field=field or None,
        status_code=400,
    )
    return JSONResponse(status_code=status, content=error_response.model_dump(mode="json"))


def create_app(
    collector: Optional[DataCollector] = None,
    service: Optional[AIEngineService] = None,
    monitor: Optional[PerformanceMonitor] = None,
) -> FastAPI:
    """Build the FastAPI application with its collector, service and monitor."""
    if collector is None:
        collector = DataCollector(CoinGeckoPriceProvider(), DefiLlamaYieldProvider())
    monitor = monitor or PerformanceMonitor()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
        AI Engine - portfolio analytics for crypto portfolios

        * **Portfolio**: rebalance recommendations and risk metrics
        * **Market**: token technical analysis, sentiment and market indicators
        * **Data**: cached prices and DeFi yield opportunities

        ## Error Responses

        All errors follow a standardized format:
        ```json
        {
            "error": true,
            "error_code": "VALIDATION_ERROR",
            "message": "Validation error",
            "detail": "weight must be between 0 and 1",
            "field": "positions[0].weight"
        }
        ```
        """,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        openapi_tags=[
            {"name": "Portfolio", "description": "Portfolio optimization and risk endpoints"},
            {"name": "Market", "description": "Market analysis and data endpoints"},
            {"name": "Health", "description": "Health check and performance metrics"},
        ],
    )

    app.state.collector = collector
    app.state.service = service or AIEngineService()
    app.state.monitor = monitor

    app.add_middleware(
        RequestProcessingMiddleware,
        monitor=monitor,
        timeout_seconds=settings.REQUEST_TIMEOUT_SECONDS,
    )

    app.add_exception_handler(AIEngineError, ai_engine_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    app.include_router(router)

    return app


app = create_app()

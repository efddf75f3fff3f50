"""
AI Engine routes.
Portfolio optimization, risk metrics, market analysis and data endpoints.
"""
import json
import logging
import math

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError as PydanticValidationError

from shared.background_tasks import DataCollector
from shared.config import settings
from shared.error_models import AIEngineError, InternalError, InvalidRequestError
from shared.performance_monitor import PerformanceMonitor
from .models import (
    HealthResponse,
    MarketAnalysis,
    MarketAnalysisRequest,
    MarketIndicators,
    Portfolio,
    PricesResponse,
    RebalanceRecommendation,
    RiskMetrics,
    YieldOpportunitiesResponse,
)
from .service import AIEngineService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_service(request: Request) -> AIEngineService:
    return request.app.state.service


def get_data_collector(request: Request) -> DataCollector:
    return request.app.state.collector


def get_performance_monitor(request: Request) -> PerformanceMonitor:
    return request.app.state.monitor


def _reject_constant(name: str):
    raise ValueError(f"non-standard JSON constant {name}")


def _parse_finite_float(text: str) -> float:
    number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"number out of range: {text}")
    return number


async def read_json_body(request: Request) -> dict:
    """
    Read and decode a JSON object body.

    The body is read in chunks and rejected as soon as it grows past
    MAX_REQUEST_BODY_BYTES.

    Raises:
        InvalidRequestError: body over MAX_REQUEST_BODY_BYTES, malformed
            JSON (including NaN/Infinity), or a JSON value that is not an object
    """
    max_bytes = settings.MAX_REQUEST_BODY_BYTES

    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > max_bytes:
        raise InvalidRequestError("Request body too large")

    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_bytes:
            raise InvalidRequestError("Request body too large")
        chunks.append(chunk)
    body = b"".join(chunks)

    try:
        data = json.loads(body, parse_constant=_reject_constant, parse_float=_parse_finite_float)
    except ValueError as e:
        raise InvalidRequestError("Invalid JSON format") from e

    if not isinstance(data, dict):
        raise InvalidRequestError("Invalid JSON format")

    return data


async def portfolio_body(data: dict = Depends(read_json_body)) -> Portfolio:
    try:
        return Portfolio.model_validate(data)
    except PydanticValidationError as e:
        raise InvalidRequestError("Invalid JSON format") from e


async def market_analysis_body(data: dict = Depends(read_json_body)) -> MarketAnalysisRequest:
    try:
        return MarketAnalysisRequest.model_validate(data)
    except PydanticValidationError as e:
        raise InvalidRequestError("Invalid JSON format") from e


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    tags=["Health"],
)
async def health(
    service: AIEngineService = Depends(get_service),
    collector: DataCollector = Depends(get_data_collector),
    monitor: PerformanceMonitor = Depends(get_performance_monitor),
):
    """
    Health check endpoint.

    Returns:
        HealthResponse: overall status plus per-service status for the
        engine and the data collector
    """
    return service.get_health(
        collector,
        monitor,
        version=settings.APP_VERSION,
        stale_threshold_seconds=settings.STALE_THRESHOLD_SECONDS,
    )


@router.get(
    "/api/market-indicators",
    response_model=MarketIndicators,
    summary="Market indicators",
    tags=["Market"],
)
async def get_market_indicators(
    service: AIEngineService = Depends(get_service),
    collector: DataCollector = Depends(get_data_collector),
):
    """Total market cap, BTC/ETH dominance and volatility from the latest snapshot."""
    try:
        return service.get_market_indicators(collector)
    except AIEngineError:
        raise
    except Exception as e:
        logger.exception("Failed to get market indicators")
        raise InternalError("Failed to get market indicators") from e


@router.post(
    "/api/optimize-portfolio",
    response_model=RebalanceRecommendation,
    summary="Portfolio rebalance recommendation",
    tags=["Portfolio"],
)
async def optimize_portfolio(
    portfolio: Portfolio = Depends(portfolio_body),
    service: AIEngineService = Depends(get_service),
):
    """
    Recommend a risk-adjusted allocation.

    Returns:
    - Prioritized buy/sell/rebalance actions
    - Expected return and risk
    - Confidence and reasoning
    """
    try:
        return service.optimize_portfolio(portfolio)
    except AIEngineError:
        raise
    except Exception as e:
        logger.exception(f"Failed to optimize portfolio {portfolio.id}")
        raise InternalError("Failed to optimize portfolio") from e


@router.post(
    "/api/risk-metrics",
    response_model=RiskMetrics,
    summary="Portfolio risk metrics",
    tags=["Portfolio"],
)
async def get_risk_metrics(
    portfolio: Portfolio = Depends(portfolio_body),
    service: AIEngineService = Depends(get_service),
):
    """VaR (95/99), volatility, Sharpe ratio, max drawdown and beta."""
    try:
        return service.calculate_risk_metrics(portfolio)
    except AIEngineError:
        raise
    except Exception as e:
        logger.exception(f"Failed to calculate risk metrics for {portfolio.id}")
        raise InternalError("Failed to calculate risk metrics") from e


@router.post(
    "/api/market-analysis",
    response_model=MarketAnalysis,
    summary="Token technical analysis and market sentiment",
    tags=["Market"],
)
async def analyze_market(
    analysis_request: MarketAnalysisRequest = Depends(market_analysis_body),
    service: AIEngineService = Depends(get_service),
):
    """
    Analyze 1 to 10 tokens.

    Token analyses are returned in request order.
    """
    try:
        return service.analyze_market(analysis_request)
    except AIEngineError:
        raise
    except Exception as e:
        logger.exception("Failed to analyze market")
        raise InternalError("Failed to analyze market") from e


@router.get(
    "/api/prices",
    response_model=PricesResponse,
    summary="Cached token prices",
    tags=["Market"],
)
async def get_prices(
    service: AIEngineService = Depends(get_service),
    collector: DataCollector = Depends(get_data_collector),
):
    """Latest snapshot per token as collected in the background."""
    return service.get_prices(collector)


@router.get(
    "/api/yield-opportunities",
    response_model=YieldOpportunitiesResponse,
    summary="DeFi yield opportunities",
    tags=["Market"],
)
async def get_yield_opportunities(
    limit: int = Query(20, ge=1, le=100, description="Maximum number of pools"),
    service: AIEngineService = Depends(get_service),
    collector: DataCollector = Depends(get_data_collector),
):
    """Pools sorted by APY, highest first."""
    return service.get_yield_opportunities(collector, limit)


@router.get(
    "/api/performance-metrics",
    response_model=dict,
    summary="Request performance metrics",
    tags=["Health"],
)
async def get_performance_metrics(monitor: PerformanceMonitor = Depends(get_performance_monitor)):
    """Request counts, timings and error rates per endpoint."""
    return monitor.get_metrics()

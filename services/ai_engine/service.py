"""
Main business logic service for the AI Engine.
Validates requests, runs the analytics kernel and composes responses.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from shared.analytics import (
    PortfolioHolding,
    analyze_tokens,
    build_rebalance_plan,
    calculate_market_sentiment,
    calculate_risk_metrics,
    normalize_timeframe,
)
from shared.background_tasks import DataCollector
from shared.performance_monitor import PerformanceMonitor
from shared.validators import validate_analysis_tokens, validate_portfolio
from .models import (
    HealthResponse,
    MarketAnalysis,
    MarketAnalysisRequest,
    MarketIndicators,
    MarketSentiment,
    Portfolio,
    PriceSnapshot,
    PricesResponse,
    RebalanceAction,
    RebalanceRecommendation,
    RiskMetrics,
    ServiceHealth,
    TokenAnalysis,
    YieldOpportunitiesResponse,
    YieldOpportunity,
)

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _holdings(portfolio: Portfolio) -> List[PortfolioHolding]:
    return [PortfolioHolding.from_position(p) for p in portfolio.positions]


class AIEngineService:
    """
    Portfolio and market analytics over a validated request.

    The clock is injectable; market analysis output depends on it.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self.clock = clock

    def optimize_portfolio(self, portfolio: Portfolio) -> RebalanceRecommendation:
        """
        Build a rebalance recommendation.

        Flow:
        1. Validate portfolio fields
        2. Analyze portfolio and compute risk-adjusted target weights
        3. Emit actions, confidence and reasoning
        """
        validate_portfolio(portfolio)

        plan = build_rebalance_plan(_holdings(portfolio), portfolio.total_value)
        logger.debug(
            f"Portfolio {portfolio.id}: {len(plan.actions)} actions, "
            f"confidence {plan.confidence:.3f}"
        )

        return RebalanceRecommendation(
            portfolio_id=portfolio.id,
            timestamp=self.clock(),
            confidence=plan.confidence,
            expected_return=plan.analysis.expected_return,
            risk=plan.analysis.risk,
            actions=[RebalanceAction(**action.to_dict()) for action in plan.actions],
            reasoning=plan.reasoning,
        )

    def calculate_risk_metrics(self, portfolio: Portfolio) -> RiskMetrics:
        """Compute VaR, volatility, Sharpe, max drawdown and beta."""
        validate_portfolio(portfolio)

        report = calculate_risk_metrics(_holdings(portfolio))

        return RiskMetrics(
            portfolio_id=portfolio.id,
            timestamp=self.clock(),
            var_95=report.var_95,
            var_99=report.var_99,
            volatility=report.volatility,
            sharpe_ratio=report.sharpe_ratio,
            max_drawdown=report.max_drawdown,
            beta=report.beta,
        )

    def analyze_market(self, request: MarketAnalysisRequest) -> MarketAnalysis:
        """Technical analysis per token (input order kept) plus sentiment."""
        validate_analysis_tokens(request.tokens)

        now = self.clock()
        now_unix = int(now.timestamp())
        sentiment = calculate_market_sentiment(now_unix)

        return MarketAnalysis(
            timestamp=now,
            timeframe=normalize_timeframe(request.timeframe),
            token_analysis=[
                TokenAnalysis(
                    token=a.token,
                    price=a.price,
                    volume_24h=a.volume_24h,
                    change_24h=a.change_24h,
                    volatility=a.volatility,
                    support_level=a.support_level,
                    resistance_level=a.resistance_level,
                    trend=a.trend,
                )
                for a in analyze_tokens(request.tokens, now_unix)
            ],
            sentiment=MarketSentiment(
                fear_greed_index=sentiment.fear_greed_index,
                bullish_sentiment=sentiment.bullish_sentiment,
                bearish_sentiment=sentiment.bearish_sentiment,
                neutral_sentiment=sentiment.neutral_sentiment,
            ),
        )

    def get_market_indicators(self, collector: DataCollector) -> MarketIndicators:
        reading = collector.get_market_indicators()
        return MarketIndicators(
            fear_greed_index=reading.fear_greed_index,
            total_market_cap=reading.total_market_cap,
            btc_dominance=reading.btc_dominance,
            eth_dominance=reading.eth_dominance,
            defi_tvl=reading.defi_tvl,
            volatility=reading.volatility,
            timestamp=self.clock(),
        )

    def get_prices(self, collector: DataCollector) -> PricesResponse:
        prices = {
            symbol: PriceSnapshot(**snapshot.to_dict())
            for symbol, snapshot in collector.get_all_prices().items()
        }
        return PricesResponse(
            prices=prices,
            last_update=collector.last_update,
            timestamp=self.clock(),
        )

    def get_yield_opportunities(self, collector: DataCollector, limit: int) -> YieldOpportunitiesResponse:
        opportunities = [YieldOpportunity(**y.to_dict()) for y in collector.get_yields(limit)]
        return YieldOpportunitiesResponse(
            opportunities=opportunities,
            count=len(opportunities),
            last_update=collector.last_yield_update,
            timestamp=self.clock(),
        )

    def get_health(
        self,
        collector: DataCollector,
        monitor: PerformanceMonitor,
        version: str,
        stale_threshold_seconds: Optional[float] = None,
    ) -> HealthResponse:
        """
        Health snapshot.

        The top-level status is always "healthy"; per-service entries carry
        the collector's staleness and the engine's request timings.
        """
        if not collector.is_running:
            collector_status = "stopped"
        elif collector.is_stale(stale_threshold_seconds):
            collector_status = "degraded"
        else:
            collector_status = "healthy"

        return HealthResponse(
            status="healthy",
            timestamp=self.clock(),
            version=version,
            uptime_seconds=monitor.uptime_seconds,
            services=[
                ServiceHealth(
                    name="ai-engine",
                    status=monitor.get_health_status(),
                    response_time_ms=monitor.average_response_ms(),
                ),
                ServiceHealth(
                    name="data-collector",
                    status=collector_status,
                    last_update=collector.last_update,
                ),
            ],
        )

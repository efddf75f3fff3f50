"""
AI Engine Analytics Kernel
Pure, testable portfolio and market calculations.
"""

from .types import (
    PortfolioHolding,
    PortfolioAnalysis,
    RebalanceAction,
    RebalancePlan,
    RiskReport,
    TokenTechnicalAnalysis,
    SentimentReading,
    MarketIndicatorReading,
)
from .reference_data import TokenProfile, get_token_profile
from .portfolio.portfolio_metrics import analyze_portfolio, calculate_risk_metrics
from .portfolio.optimizer import build_rebalance_plan
from .market.technical_analysis import analyze_tokens, calculate_market_sentiment, normalize_timeframe
from .market.market_indicators import calculate_market_indicators

__all__ = [
    # Types
    "PortfolioHolding",
    "PortfolioAnalysis",
    "RebalanceAction",
    "RebalancePlan",
    "RiskReport",
    "TokenTechnicalAnalysis",
    "SentimentReading",
    "MarketIndicatorReading",
    # Reference data
    "TokenProfile",
    "get_token_profile",
    # Portfolio
    "analyze_portfolio",
    "calculate_risk_metrics",
    "build_rebalance_plan",
    # Market
    "analyze_tokens",
    "calculate_market_sentiment",
    "normalize_timeframe",
    "calculate_market_indicators",
]

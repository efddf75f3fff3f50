"""
Market Analysis Module
Token technical analysis, sentiment and market-wide indicators.
"""

from .technical_analysis import (
    analyze_token,
    analyze_tokens,
    calculate_market_sentiment,
    normalize_timeframe,
)
from .market_indicators import calculate_market_indicators

__all__ = [
    "analyze_token",
    "analyze_tokens",
    "calculate_market_sentiment",
    "normalize_timeframe",
    "calculate_market_indicators",
]

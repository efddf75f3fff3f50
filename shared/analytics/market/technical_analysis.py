"""
Market Analysis
Deterministic per-token technical analysis and aggregate sentiment.

All time-dependent values are driven by the caller-supplied unix time
(seconds) so results are reproducible under a pinned clock.

Token analysis:
1. Base price p and volatility v from the reference table
2. Support = p * (1 - 0.1v), Resistance = p * (1 + 0.1v)
3. 24h change = sin((now mod 86400) / 86400 * 2pi) * v * 0.1
4. Price = p * (1 + 24h change)
5. Trend from sin(now / 3600): > 0.3 bullish, < -0.3 bearish

Sentiment:
1. Fear & greed f = 50 + 20 * sin(now / 86400)
2. Start 60/25/15 (bullish/bearish/neutral)
3. f > 60 -> +10/-5/-5, f < 40 -> -10/+10/0
"""
import math
from typing import List

from ..reference_data import get_base_price, get_reference_volume, get_volatility
from ..types import SentimentReading, TokenTechnicalAnalysis

SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600

DEFAULT_TIMEFRAME = "1d"
LEVEL_BAND = 0.1
CHANGE_SCALE = 0.1
TREND_THRESHOLD = 0.3

FEAR_GREED_BASE = 50.0
FEAR_GREED_AMPLITUDE = 20.0
GREED_LEVEL = 60.0
FEAR_LEVEL = 40.0


def normalize_timeframe(timeframe: str) -> str:
    """Empty timeframe is coerced to 1d."""
    return timeframe or DEFAULT_TIMEFRAME


def classify_trend(now_unix: int) -> str:
    signal = math.sin(now_unix / SECONDS_PER_HOUR)
    if signal > TREND_THRESHOLD:
        return "bullish"
    if signal < -TREND_THRESHOLD:
        return "bearish"
    return "neutral"


def calculate_change_24h(token: str, now_unix: int) -> float:
    """Simulated 24h change, a fraction (0.01 == 1%)."""
    day_phase = (now_unix % SECONDS_PER_DAY) / SECONDS_PER_DAY
    return math.sin(day_phase * 2 * math.pi) * get_volatility(token) * CHANGE_SCALE


def analyze_token(token: str, now_unix: int) -> TokenTechnicalAnalysis:
    """Build the technical analysis for a single token."""
    base_price = get_base_price(token)
    volatility = get_volatility(token)
    change_24h = calculate_change_24h(token, now_unix)

    return TokenTechnicalAnalysis(
        token=token,
        price=base_price * (1 + change_24h),
        volume_24h=get_reference_volume(token),
        change_24h=change_24h,
        volatility=volatility,
        support_level=base_price * (1 - LEVEL_BAND * volatility),
        resistance_level=base_price * (1 + LEVEL_BAND * volatility),
        trend=classify_trend(now_unix),
    )


def analyze_tokens(tokens: List[str], now_unix: int) -> List[TokenTechnicalAnalysis]:
    """Analyze tokens in the order given."""
    return [analyze_token(token, now_unix) for token in tokens]


def calculate_market_sentiment(now_unix: int) -> SentimentReading:
    """
    Calculate aggregate market sentiment.

    The adjusted percentages are not renormalised; every branch (neutral,
    greed and fear) sums to 100.
    """
    fear_greed = FEAR_GREED_BASE + FEAR_GREED_AMPLITUDE * math.sin(now_unix / SECONDS_PER_DAY)

    bullish = 60.0
    bearish = 25.0
    neutral = 15.0

    if fear_greed > GREED_LEVEL:
        bullish += 10
        bearish -= 5
        neutral -= 5
    elif fear_greed < FEAR_LEVEL:
        bullish -= 10
        bearish += 10

    return SentimentReading(
        fear_greed_index=fear_greed,
        bullish_sentiment=bullish,
        bearish_sentiment=bearish,
        neutral_sentiment=neutral,
    )

"""
Market Indicators
Aggregates computed at read time from the latest price snapshots.
"""
from typing import Mapping

from ..types import MarketIndicatorReading

# No upstream source yet for these two; fixed values are reported.
PLACEHOLDER_FEAR_GREED_INDEX = 50.0
PLACEHOLDER_DEFI_TVL = 250_000_000_000.0

VOLATILITY_SCALE = 0.15


def _dominance(snapshots: Mapping, symbol: str, total_market_cap: float) -> float:
    snapshot = snapshots.get(symbol)
    if snapshot is None or total_market_cap <= 0:
        return 0.0
    return snapshot.market_cap / total_market_cap * 100


def calculate_market_indicators(snapshots: Mapping) -> MarketIndicatorReading:
    """
    Calculate market-wide indicators.

    Args:
        snapshots: symbol -> snapshot exposing market_cap and change_24h

    Returns:
        MarketIndicatorReading; dominance and volatility are 0 when the
        mapping is empty.
    """
    total_market_cap = sum(s.market_cap for s in snapshots.values())

    volatility = 0.0
    if snapshots:
        volatility = sum(abs(s.change_24h) * VOLATILITY_SCALE for s in snapshots.values()) / len(snapshots)

    return MarketIndicatorReading(
        fear_greed_index=PLACEHOLDER_FEAR_GREED_INDEX,
        total_market_cap=total_market_cap,
        btc_dominance=_dominance(snapshots, "BTC", total_market_cap),
        eth_dominance=_dominance(snapshots, "ETH", total_market_cap),
        defi_tvl=PLACEHOLDER_DEFI_TVL,
        volatility=volatility,
    )

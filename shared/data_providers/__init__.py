"""
External market data providers.
"""
from .interfaces import PriceData, YieldData, PriceDataProvider, YieldDataProvider
from .coingecko_provider import CoinGeckoPriceProvider
from .defillama_provider import DefiLlamaYieldProvider

__all__ = [
    "PriceData",
    "YieldData",
    "PriceDataProvider",
    "YieldDataProvider",
    "CoinGeckoPriceProvider",
    "DefiLlamaYieldProvider",
]

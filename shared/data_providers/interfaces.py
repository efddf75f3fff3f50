"""
Data Provider Interfaces.
Price snapshots and yield opportunities fed into the AI engine.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Dict, List

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_utc(value: datetime) -> str:
    """RFC 3339 UTC timestamp with a Z suffix."""
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class PriceData:
    """Latest spot snapshot for a token."""
    def __init__(
        self,
        symbol: str,
        price: float,
        change_24h: float,
        volume_24h: float,
        market_cap: float,
        source: str,
        timestamp: datetime
    ):
        self.symbol = symbol
        self.price = price
        self.change_24h = change_24h
        self.volume_24h = volume_24h
        self.market_cap = market_cap
        self.source = source
        self.timestamp = timestamp

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "price": self.price,
            "change_24h": self.change_24h,
            "volume_24h": self.volume_24h,
            "market_cap": self.market_cap,
            "source": self.source,
            "timestamp": isoformat_utc(self.timestamp),
        }


class YieldData:
    """A DeFi yield opportunity."""
    def __init__(
        self,
        protocol: str,
        token: str,
        apy: float,
        tvl: float,
        risk: float,
        timestamp: datetime
    ):
        self.protocol = protocol
        self.token = token
        self.apy = apy
        self.tvl = tvl
        self.risk = risk
        self.timestamp = timestamp

    def to_dict(self) -> dict:
        return {
            "protocol": self.protocol,
            "token": self.token,
            "apy": self.apy,
            "tvl": self.tvl,
            "risk": self.risk,
            "timestamp": isoformat_utc(self.timestamp),
        }


class PriceDataProvider(ABC):
    """Interface for spot price providers (CoinGecko)."""

    @abstractmethod
    async def get_prices(self) -> Dict[str, PriceData]:
        """
        Fetch the tracked tokens' prices keyed by symbol.

        Raises:
            UpstreamUnavailableError: on transport, status or parse failure
        """
        pass

    @abstractmethod
    async def close(self):
        pass


class YieldDataProvider(ABC):
    """Interface for yield providers (DeFiLlama)."""

    @abstractmethod
    async def get_yields(self) -> List[YieldData]:
        """
        Fetch current yield opportunities.

        Raises:
            UpstreamUnavailableError: on transport, status or parse failure
        """
        pass

    @abstractmethod
    async def close(self):
        pass

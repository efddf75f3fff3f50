"""
Background data collection for the AI Engine.
Keeps the market snapshot cache and the yield list fresh.
"""
import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

from .analytics.market.market_indicators import calculate_market_indicators
from .analytics.types import MarketIndicatorReading
from .config import settings
from .data_providers.interfaces import (
    Clock,
    PriceData,
    PriceDataProvider,
    YieldData,
    YieldDataProvider,
    utc_now,
)
from .error_models import AlreadyRunningError, UpstreamUnavailableError
from .snapshot_cache import MarketSnapshotCache

logger = logging.getLogger(__name__)

# symbol -> (price, change_24h, volume_24h, market_cap)
MOCK_PRICES = {
    "BTC": (42000.0, 2.5, 15_000_000_000.0, 825_000_000_000.0),
    "ETH": (2500.0, 3.2, 8_000_000_000.0, 300_000_000_000.0),
    "LINK": (15.0, -1.8, 400_000_000.0, 8_500_000_000.0),
}


def build_mock_snapshot(now: datetime) -> Dict[str, PriceData]:
    """Fixed fallback prices used when the price API is unavailable."""
    return {
        symbol: PriceData(
            symbol=symbol,
            price=price,
            change_24h=change,
            volume_24h=volume,
            market_cap=market_cap,
            source="mock",
            timestamp=now,
        )
        for symbol, (price, change, volume, market_cap) in MOCK_PRICES.items()
    }


class DataCollector:
    """
    Periodically refreshes market data.

    - Prices every PRICE_REFRESH_INTERVAL_SECONDS, with an awaited initial
      refresh on start and mock fallback on upstream failure
    - Yield opportunities every YIELD_REFRESH_INTERVAL_SECONDS (optional)

    start() on a running collector raises AlreadyRunningError; stop() is
    idempotent and no cache writes happen once it returns.
    """

    def __init__(
        self,
        price_provider: PriceDataProvider,
        yield_provider: Optional[YieldDataProvider] = None,
        cache: Optional[MarketSnapshotCache] = None,
        clock: Clock = utc_now,
        price_interval: Optional[float] = None,
        yield_interval: Optional[float] = None,
    ):
        self.price_provider = price_provider
        self.yield_provider = yield_provider
        self.cache = cache if cache is not None else MarketSnapshotCache()
        self.clock = clock
        self.price_interval = price_interval or settings.PRICE_REFRESH_INTERVAL_SECONDS
        self.yield_interval = yield_interval or settings.YIELD_REFRESH_INTERVAL_SECONDS

        self._tasks: Dict[str, asyncio.Task] = {}
        self._is_running = False
        self._last_update: Optional[datetime] = None
        self._last_yield_update: Optional[datetime] = None
        self._yields: List[YieldData] = []

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def last_update(self) -> Optional[datetime]:
        """Time of the last price snapshot written to the cache."""
        return self._last_update

    @property
    def last_yield_update(self) -> Optional[datetime]:
        return self._last_yield_update

    async def start(self):
        """Start the collector."""
        if self._is_running:
            raise AlreadyRunningError("data collector is already running")

        self._is_running = True
        logger.info("Starting data collector...")

        try:
            await self.refresh_prices()
        except Exception:
            self._is_running = False
            raise

        self._tasks["price_refresh"] = asyncio.create_task(self._price_refresh_loop())
        if self.yield_provider is not None:
            self._tasks["yield_refresh"] = asyncio.create_task(self._yield_refresh_loop())

        logger.info("Data collector started")

    async def stop(self):
        """Stop the collector. Safe to call more than once."""
        if not self._is_running:
            return

        self._is_running = False

        for task in self._tasks.values():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        self._tasks.clear()
        logger.info("Data collector stopped")

    async def close(self):
        """Stop and release provider HTTP clients."""
        await self.stop()
        await self.price_provider.close()
        if self.yield_provider is not None:
            await self.yield_provider.close()

    async def refresh_prices(self):
        """Fetch prices once, falling back to mock data on upstream failure."""
        try:
            prices = await self.price_provider.get_prices()
        except UpstreamUnavailableError as e:
            logger.warning(f"Price fetch failed, using mock data: {e}")
            prices = build_mock_snapshot(self.clock())
        except Exception:
            logger.exception("Unexpected error fetching prices, using mock data")
            prices = build_mock_snapshot(self.clock())

        if not self._is_running:
            logger.debug("Collector stopped, discarding price refresh")
            return

        # One token at a time
        for snapshot in prices.values():
            self.cache.put(snapshot)

        self._last_update = self.clock()
        logger.debug(f"Market snapshot updated: {', '.join(prices)}")

    async def refresh_yields(self):
        """Fetch yields once, keeping the previous list on failure."""
        if self.yield_provider is None:
            return

        try:
            yields = await self.yield_provider.get_yields()
        except UpstreamUnavailableError as e:
            logger.warning(f"Yield fetch failed, keeping previous data: {e}")
            return

        if not self._is_running:
            return

        self._yields = yields
        self._last_yield_update = self.clock()
        logger.debug(f"Yield opportunities updated: {len(yields)} pools")

    async def _price_refresh_loop(self):
        """Refresh prices on a fixed interval."""
        while self._is_running:
            await asyncio.sleep(self.price_interval)
            try:
                await self.refresh_prices()
            except Exception:
                logger.exception("Error in price refresh")

    async def _yield_refresh_loop(self):
        """Refresh yields on a fixed interval."""
        while self._is_running:
            try:
                await self.refresh_yields()
            except Exception:
                logger.exception("Error in yield refresh")

            await asyncio.sleep(self.yield_interval)

    def is_stale(self, threshold_seconds: Optional[float] = None) -> bool:
        """True when no snapshot exists or the last one is older than the threshold."""
        if self._last_update is None:
            return True
        threshold = threshold_seconds if threshold_seconds is not None else settings.STALE_THRESHOLD_SECONDS
        return (self.clock() - self._last_update).total_seconds() > threshold

    def get_all_prices(self) -> Dict[str, PriceData]:
        return self.cache.get_all()

    def get_market_indicators(self) -> MarketIndicatorReading:
        return calculate_market_indicators(self.cache.get_all())

    def get_yields(self, limit: Optional[int] = None) -> List[YieldData]:
        """Yield opportunities sorted by APY, highest first."""
        yields = sorted(self._yields, key=lambda y: y.apy, reverse=True)
        if limit is not None:
            yields = yields[:limit]
        return yields

"""
Unit tests for the market snapshot cache.
"""
import threading
from datetime import datetime, timezone

import pytest

from shared.data_providers.interfaces import PriceData
from shared.snapshot_cache import MarketSnapshotCache

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _snapshot(symbol: str, price: float) -> PriceData:
    return PriceData(
        symbol=symbol,
        price=price,
        change_24h=price / 1000,
        volume_24h=price * 10,
        market_cap=price * 100,
        source="mock",
        timestamp=NOW,
    )


@pytest.mark.unit
class TestMarketSnapshotCache:

    def test_put_and_get(self):
        cache = MarketSnapshotCache()
        cache.put(_snapshot("BTC", 42000.0))

        assert cache.get("BTC").price == 42000.0
        assert cache.get("ETH") is None
        assert len(cache) == 1

    def test_put_replaces_record(self):
        cache = MarketSnapshotCache()
        cache.put(_snapshot("BTC", 1.0))
        cache.put(_snapshot("BTC", 2.0))

        assert cache.get("BTC").price == 2.0
        assert len(cache) == 1

    def test_get_all_returns_copy(self):
        cache = MarketSnapshotCache()
        cache.put(_snapshot("BTC", 1.0))

        snapshot = cache.get_all()
        snapshot.pop("BTC")

        assert cache.get("BTC") is not None

    def test_concurrent_readers_see_complete_records(self):
        cache = MarketSnapshotCache()
        cache.put(_snapshot("BTC", 1.0))
        torn = []

        def writer():
            for i in range(2, 500):
                cache.put(_snapshot("BTC", float(i)))

        def reader():
            for _ in range(500):
                record = cache.get("BTC")
                if record.market_cap != record.price * 100:
                    torn.append(record)

        threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert torn == []
        assert cache.get("BTC").price == 499.0

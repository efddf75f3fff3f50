"""
Unit tests for the background data collector.
"""
import asyncio

import httpx
import pytest

from shared.background_tasks import MOCK_PRICES, DataCollector
from shared.error_models import AlreadyRunningError


def _unavailable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


def _server_error(request: httpx.Request) -> httpx.Response:
    return httpx.Response(500, json={"error": "boom"})


@pytest.mark.unit
class TestDataCollector:
    """Test collector lifecycle and fallback behaviour."""

    async def test_start_populates_cache(self, collector: DataCollector):
        await collector.start()
        try:
            prices = collector.get_all_prices()
            assert set(prices) == {"BTC", "ETH", "LINK"}
            assert prices["BTC"].price == 43000.0
            assert prices["BTC"].source == "coingecko"
            assert collector.last_update is not None
            assert collector.is_running
        finally:
            await collector.close()

    async def test_start_twice_raises(self, collector: DataCollector):
        await collector.start()
        try:
            with pytest.raises(AlreadyRunningError):
                await collector.start()
        finally:
            await collector.close()

    async def test_stop_twice_is_noop(self, collector: DataCollector):
        await collector.start()
        await collector.stop()
        await collector.stop()
        assert not collector.is_running
        await collector.close()

    async def test_restart_after_stop(self, collector: DataCollector):
        await collector.start()
        await collector.stop()
        await collector.start()
        assert collector.is_running
        await collector.close()

    @pytest.mark.parametrize("handler", [_unavailable, _server_error])
    async def test_upstream_failure_uses_mock_snapshot(self, collector_factory, handler):
        collector = collector_factory(price_handler=handler)
        await collector.start()
        try:
            prices = collector.get_all_prices()
            assert set(prices) == set(MOCK_PRICES)
            for symbol, (price, change, volume, market_cap) in MOCK_PRICES.items():
                assert prices[symbol].price == price
                assert prices[symbol].change_24h == change
                assert prices[symbol].volume_24h == volume
                assert prices[symbol].market_cap == market_cap
                assert prices[symbol].source == "mock"
        finally:
            await collector.close()

    async def test_missing_coin_uses_mock_snapshot(self, collector_factory, coingecko_payload):
        del coingecko_payload["chainlink"]
        collector = collector_factory(
            price_handler=lambda request: httpx.Response(200, json=coingecko_payload)
        )
        await collector.start()
        try:
            assert collector.get_all_prices()["BTC"].source == "mock"
        finally:
            await collector.close()

    async def test_out_of_range_timestamp_uses_mock_snapshot(self, collector_factory, coingecko_payload):
        coingecko_payload["bitcoin"]["last_updated_at"] = 10 ** 20
        collector = collector_factory(
            price_handler=lambda request: httpx.Response(200, json=coingecko_payload)
        )
        await collector.start()
        try:
            assert collector.is_running
            assert collector.get_all_prices()["BTC"].source == "mock"
            assert "price_refresh" in collector._tasks
        finally:
            await collector.close()

    async def test_unexpected_provider_error_uses_mock_snapshot(self, collector: DataCollector, monkeypatch):
        async def broken():
            raise RuntimeError("parser exploded")

        monkeypatch.setattr(collector.price_provider, "get_prices", broken)
        await collector.start()
        try:
            assert collector.is_running
            assert collector.get_all_prices()["ETH"].price == MOCK_PRICES["ETH"][0]
        finally:
            await collector.close()

    async def test_failed_start_can_be_retried(self, collector: DataCollector, monkeypatch):
        def broken_put(snapshot):
            raise RuntimeError("cache unavailable")

        monkeypatch.setattr(collector.cache, "put", broken_put)
        with pytest.raises(RuntimeError):
            await collector.start()
        assert not collector.is_running

        monkeypatch.undo()
        await collector.start()
        try:
            assert collector.is_running
        finally:
            await collector.close()

    async def test_no_cache_writes_after_stop(self, collector: DataCollector):
        await collector.start()
        await collector.stop()
        collector.cache.clear()
        yields_before = len(collector.get_yields())

        await collector.refresh_prices()
        await collector.refresh_yields()

        assert collector.get_all_prices() == {}
        assert len(collector.get_yields()) == yields_before
        await collector.close()

    async def test_periodic_refresh(self, collector_factory, coingecko_payload):
        calls = []

        def handler(request):
            calls.append(request.url)
            return httpx.Response(200, json=coingecko_payload)

        collector = collector_factory(price_handler=handler, price_interval=0.01)
        await collector.start()
        try:
            await asyncio.sleep(0.1)
        finally:
            await collector.close()

        assert len(calls) >= 2
        params = calls[0].params
        assert params["ids"] == "bitcoin,ethereum,chainlink"
        assert params["include_last_updated_at"] == "true"
        assert calls[0].path.endswith("/simple/price")

    async def test_yields_sorted_and_filtered(self, collector: DataCollector):
        await collector.start()
        try:
            await collector.refresh_yields()
            yields = collector.get_yields()
        finally:
            await collector.close()

        assert [y.protocol for y in yields] == ["newfarm", "aave-v3", "curve-dex"]
        assert yields[0].apy == pytest.approx(0.25)
        assert collector.get_yields(limit=1)[0].protocol == "newfarm"

    async def test_yield_failure_keeps_previous_list(self, collector_factory, defillama_payload):
        state = {"fail": False}

        def handler(request):
            if state["fail"]:
                return httpx.Response(503)
            return httpx.Response(200, json=defillama_payload)

        collector = collector_factory(yield_handler=handler)
        await collector.start()
        try:
            await collector.refresh_yields()
            state["fail"] = True
            await collector.refresh_yields()
            assert len(collector.get_yields()) == 3
        finally:
            await collector.close()

    async def test_market_indicators_from_cache(self, collector: DataCollector):
        await collector.start()
        try:
            indicators = collector.get_market_indicators()
        finally:
            await collector.close()

        total = 840e9 + 280e9 + 8e9
        assert indicators.total_market_cap == pytest.approx(total)
        assert indicators.btc_dominance == pytest.approx(840e9 / total * 100)

    async def test_staleness(self, collector: DataCollector):
        assert collector.is_stale()
        await collector.start()
        try:
            assert not collector.is_stale(300)
            assert collector.is_stale(-1)
        finally:
            await collector.close()

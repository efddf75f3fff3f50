"""
Unit tests for the CoinGecko and DeFiLlama providers.
"""
from datetime import datetime, timezone

import httpx
import pytest

from shared.data_providers import CoinGeckoPriceProvider, DefiLlamaYieldProvider
from shared.data_providers.defillama_provider import calculate_risk_score
from shared.error_models import UpstreamUnavailableError

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.unit
class TestCoinGeckoPriceProvider:

    async def test_parses_tracked_coins(self, coingecko_payload):
        provider = CoinGeckoPriceProvider(client=_client(lambda r: httpx.Response(200, json=coingecko_payload)))
        prices = await provider.get_prices()
        await provider.close()

        assert list(prices) == ["BTC", "ETH", "LINK"]
        eth = prices["ETH"]
        assert eth.price == 2300.0
        assert eth.change_24h == -0.5
        assert eth.volume_24h == 9_000_000_000.0
        assert eth.market_cap == 280_000_000_000.0
        assert eth.timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)

    async def test_missing_last_updated_uses_clock(self, coingecko_payload):
        for coin in coingecko_payload.values():
            del coin["last_updated_at"]
        provider = CoinGeckoPriceProvider(
            client=_client(lambda r: httpx.Response(200, json=coingecko_payload)),
            clock=lambda: NOW,
        )
        prices = await provider.get_prices()
        await provider.close()

        assert prices["BTC"].timestamp == NOW

    async def test_out_of_range_timestamp_raises(self, coingecko_payload):
        coingecko_payload["bitcoin"]["last_updated_at"] = 10 ** 20
        provider = CoinGeckoPriceProvider(client=_client(lambda r: httpx.Response(200, json=coingecko_payload)))
        with pytest.raises(UpstreamUnavailableError):
            await provider.get_prices()
        await provider.close()

    @pytest.mark.parametrize("response", [
        httpx.Response(429, json={"status": "rate limited"}),
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json=[1, 2, 3]),
        httpx.Response(200, json={"bitcoin": {"usd": "abc"}, "ethereum": {"usd": 1}, "chainlink": {"usd": 1}}),
    ])
    async def test_bad_responses_raise(self, response):
        provider = CoinGeckoPriceProvider(client=_client(lambda r: response))
        with pytest.raises(UpstreamUnavailableError):
            await provider.get_prices()
        await provider.close()

    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        provider = CoinGeckoPriceProvider(client=_client(handler))
        with pytest.raises(UpstreamUnavailableError):
            await provider.get_prices()
        await provider.close()


@pytest.mark.unit
class TestDefiLlamaYieldProvider:

    async def test_filters_and_converts(self, defillama_payload):
        provider = DefiLlamaYieldProvider(
            client=_client(lambda r: httpx.Response(200, json=defillama_payload)),
            clock=lambda: NOW,
        )
        yields = await provider.get_yields()
        await provider.close()

        assert [y.protocol for y in yields] == ["aave-v3", "newfarm", "curve-dex"]
        aave = yields[0]
        assert aave.token == "USDC"
        assert aave.apy == pytest.approx(0.045)
        assert aave.tvl == 500_000_000
        assert aave.risk == pytest.approx(0.2)
        assert aave.timestamp == NOW

    async def test_invalid_payload_raises(self):
        provider = DefiLlamaYieldProvider(client=_client(lambda r: httpx.Response(200, json={"status": "error"})))
        with pytest.raises(UpstreamUnavailableError):
            await provider.get_yields()
        await provider.close()


@pytest.mark.unit
class TestRiskScore:

    @pytest.mark.parametrize("protocol,tvl,expected", [
        ("aave", 500_000_000, 0.2),
        ("aave-v3", 50_000_000, 0.3),
        ("unknown", 50_000_000, 0.5),
        ("unknown", 5_000_000, 0.7),
        ("Lido", 5_000_000, 0.5),
    ])
    def test_risk_score(self, protocol, tvl, expected):
        assert calculate_risk_score(protocol, tvl) == pytest.approx(expected)

    def test_risk_score_bounds(self):
        for protocol in ("aave", "unknown"):
            for tvl in (0, 1e6, 1e12):
                assert 0.0 <= calculate_risk_score(protocol, tvl) <= 1.0

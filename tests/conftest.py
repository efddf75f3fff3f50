"""
Pytest configuration and shared fixtures.
"""
import copy
import os
import sys
from datetime import datetime, timezone
from typing import Generator

import httpx
import pytest
from fastapi.testclient import TestClient

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from shared.background_tasks import DataCollector
from shared.data_providers import CoinGeckoPriceProvider, DefiLlamaYieldProvider
from shared.performance_monitor import PerformanceMonitor


FIXED_NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)
LAST_UPDATED_AT = 1704067200  # 2024-01-01T00:00:00Z

COINGECKO_PAYLOAD = {
    "bitcoin": {
        "usd": 43000.0,
        "usd_market_cap": 840_000_000_000.0,
        "usd_24h_vol": 20_000_000_000.0,
        "usd_24h_change": 1.5,
        "last_updated_at": LAST_UPDATED_AT,
    },
    "ethereum": {
        "usd": 2300.0,
        "usd_market_cap": 280_000_000_000.0,
        "usd_24h_vol": 9_000_000_000.0,
        "usd_24h_change": -0.5,
        "last_updated_at": LAST_UPDATED_AT,
    },
    "chainlink": {
        "usd": 14.5,
        "usd_market_cap": 8_000_000_000.0,
        "usd_24h_vol": 300_000_000.0,
        "usd_24h_change": 2.0,
        "last_updated_at": LAST_UPDATED_AT,
    },
}

DEFILLAMA_PAYLOAD = {
    "status": "success",
    "data": [
        {"pool": "p-1", "chain": "Ethereum", "project": "aave-v3", "symbol": "USDC", "apy": 4.5, "tvlUsd": 500_000_000},
        {"pool": "p-2", "chain": "Ethereum", "project": "newfarm", "symbol": "ETH-XYZ", "apy": 25.0, "tvlUsd": 5_000_000},
        {"pool": "p-3", "chain": "Arbitrum", "project": "curve-dex", "symbol": "USDT-USDC", "apy": 3.0, "tvlUsd": 50_000_000},
        {"pool": "p-4", "chain": "Ethereum", "project": "tinyfarm", "symbol": "DOGE", "apy": 80.0, "tvlUsd": 500_000},
        {"pool": "p-5", "chain": "Ethereum", "project": "lido", "symbol": "STETH", "apy": 0, "tvlUsd": 9_000_000_000},
    ],
}


def fixed_clock() -> datetime:
    return FIXED_NOW


def json_handler(payload, status_code: int = 200):
    """MockTransport handler returning a fixed JSON payload."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload)
    return handler


def failing_handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


def make_collector(price_handler=None, yield_handler=None, **kwargs) -> DataCollector:
    """Collector wired to httpx.MockTransport instead of the real APIs."""
    price_provider = CoinGeckoPriceProvider(
        client=httpx.AsyncClient(transport=httpx.MockTransport(price_handler or json_handler(COINGECKO_PAYLOAD))),
        clock=fixed_clock,
    )
    yield_provider = DefiLlamaYieldProvider(
        client=httpx.AsyncClient(transport=httpx.MockTransport(yield_handler or json_handler(DEFILLAMA_PAYLOAD))),
        clock=fixed_clock,
    )
    return DataCollector(price_provider, yield_provider, clock=fixed_clock, **kwargs)


@pytest.fixture(scope="function")
def collector() -> DataCollector:
    return make_collector()


@pytest.fixture(scope="function")
def monitor() -> PerformanceMonitor:
    return PerformanceMonitor()


@pytest.fixture(scope="function")
def app(collector, monitor):
    """AI engine app with mocked upstream APIs and a pinned clock."""
    from services.ai_engine.main import create_app
    from services.ai_engine.service import AIEngineService

    return create_app(collector=collector, service=AIEngineService(clock=fixed_clock), monitor=monitor)


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Test client with the app lifespan (collector start/stop) running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def balanced_portfolio() -> dict:
    return {
        "id": "p1",
        "positions": [
            {"token": "BTC", "weight": 0.5, "amount": 1, "value": 50000, "yield_apy": 0},
            {"token": "ETH", "weight": 0.5, "amount": 20, "value": 50000, "yield_apy": 0},
        ],
        "total_value": 100000,
    }


@pytest.fixture
def collector_factory():
    """Build collectors with custom MockTransport handlers."""
    return make_collector


@pytest.fixture
def coingecko_payload() -> dict:
    return copy.deepcopy(COINGECKO_PAYLOAD)


@pytest.fixture
def defillama_payload() -> dict:
    return copy.deepcopy(DEFILLAMA_PAYLOAD)

"""
CoinGecko Price Provider.
Implements PriceDataProvider for the tokens tracked by the AI engine.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Optional

import httpx

from .interfaces import Clock, PriceData, PriceDataProvider, utc_now
from shared.config import settings
from shared.error_models import UpstreamUnavailableError

logger = logging.getLogger(__name__)

# CoinGecko id -> token symbol
TRACKED_COINS = {
    "bitcoin": "BTC",
    "ethereum": "ETH",
    "chainlink": "LINK",
}


class CoinGeckoPriceProvider(PriceDataProvider):
    """CoinGecko implementation of PriceDataProvider."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, clock: Clock = utc_now):
        self.base_url = settings.COINGECKO_API_URL.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=settings.PRICE_CLIENT_TIMEOUT_SECONDS)
        self.api_key = settings.COINGECKO_API_KEY or ''
        self.request_timeout = settings.PRICE_REQUEST_TIMEOUT_SECONDS
        self.clock = clock

    async def get_prices(self) -> Dict[str, PriceData]:
        """Fetch BTC, ETH and LINK in a single simple/price call."""
        url = f"{self.base_url}/simple/price"
        params = {
            "ids": ",".join(TRACKED_COINS),
            "vs_currencies": "usd",
            "include_24hr_change": "true",
            "include_24hr_vol": "true",
            "include_market_cap": "true",
            "include_last_updated_at": "true",
        }

        if self.api_key:
            params["x_cg_demo_api_key"] = self.api_key

        try:
            response = await self.client.get(url, params=params, timeout=self.request_timeout)
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"CoinGecko request failed: {e}") from e

        if response.status_code != 200:
            raise UpstreamUnavailableError(f"CoinGecko returned status {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamUnavailableError(f"CoinGecko returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise UpstreamUnavailableError("CoinGecko response is not an object")

        prices = {}
        for gecko_id, symbol in TRACKED_COINS.items():
            coin_data = data.get(gecko_id)
            if not isinstance(coin_data, dict) or "usd" not in coin_data:
                raise UpstreamUnavailableError(f"CoinGecko response missing {gecko_id}")
            prices[symbol] = self._parse_coin(symbol, coin_data)

        return prices

    def _parse_coin(self, symbol: str, coin_data: dict) -> PriceData:
        try:
            last_updated = coin_data.get("last_updated_at")
            if last_updated:
                timestamp = datetime.fromtimestamp(int(last_updated), tz=timezone.utc)
            else:
                timestamp = self.clock()

            return PriceData(
                symbol=symbol,
                price=float(coin_data["usd"]),
                change_24h=float(coin_data.get("usd_24h_change") or 0),
                volume_24h=float(coin_data.get("usd_24h_vol") or 0),
                market_cap=float(coin_data.get("usd_market_cap") or 0),
                source="coingecko",
                timestamp=timestamp,
            )
        except (TypeError, ValueError, OverflowError, OSError) as e:
            raise UpstreamUnavailableError(f"CoinGecko returned malformed data for {symbol}: {e}") from e

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()

"""
DeFiLlama Yield Provider.
Implements YieldDataProvider on top of the public yields API.

Risk score heuristic (0 = safest, 1 = riskiest):
1. Start at 0.5
2. Established protocol -> -0.2
3. TVL > 100M -> -0.1
4. TVL < 10M -> +0.2
5. Clamp to [0, 1]
"""
import logging
from typing import List, Optional

import httpx

from .interfaces import Clock, YieldData, YieldDataProvider, utc_now
from shared.config import settings
from shared.error_models import UpstreamUnavailableError

logger = logging.getLogger(__name__)

MIN_TVL_USD = 1_000_000.0
HIGH_TVL_USD = 100_000_000.0
LOW_TVL_USD = 10_000_000.0

ESTABLISHED_PROTOCOLS = frozenset({
    "aave", "compound", "uniswap", "curve", "lido", "convex", "yearn",
})


def calculate_risk_score(protocol: str, tvl: float) -> float:
    """Heuristic protocol risk score in [0, 1]."""
    risk = 0.5

    # DeFiLlama project slugs carry a version suffix, e.g. aave-v3
    if protocol.lower().split("-")[0] in ESTABLISHED_PROTOCOLS:
        risk -= 0.2

    if tvl > HIGH_TVL_USD:
        risk -= 0.1
    elif tvl < LOW_TVL_USD:
        risk += 0.2

    return max(0.0, min(risk, 1.0))


class DefiLlamaYieldProvider(YieldDataProvider):
    """DeFiLlama implementation of YieldDataProvider."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, clock: Clock = utc_now):
        self.base_url = settings.DEFILLAMA_YIELDS_URL.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=settings.PRICE_CLIENT_TIMEOUT_SECONDS)
        self.clock = clock

    async def get_yields(self) -> List[YieldData]:
        """Fetch pools with TVL > 1M and a positive APY."""
        try:
            response = await self.client.get(f"{self.base_url}/pools")
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"DeFiLlama request failed: {e}") from e

        if response.status_code != 200:
            raise UpstreamUnavailableError(f"DeFiLlama returned status {response.status_code}")

        try:
            pools = response.json()["data"]
        except (ValueError, KeyError, TypeError) as e:
            raise UpstreamUnavailableError(f"DeFiLlama returned invalid payload: {e}") from e

        now = self.clock()
        yields = []
        for pool in pools:
            try:
                tvl = float(pool.get("tvlUsd") or 0)
                apy = float(pool.get("apy") or 0)
            except (AttributeError, TypeError, ValueError):
                logger.debug(f"Skipping malformed pool entry: {pool!r}")
                continue

            if tvl <= MIN_TVL_USD or apy <= 0:
                continue

            protocol = pool.get("project", "")
            yields.append(YieldData(
                protocol=protocol,
                token=pool.get("symbol", ""),
                apy=apy / 100,
                tvl=tvl,
                risk=calculate_risk_score(protocol, tvl),
                timestamp=now,
            ))

        return yields

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()

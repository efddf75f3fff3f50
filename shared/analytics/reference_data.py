"""
Token Reference Table.

Static per-token constants used by the analytics engine:
expected annual return, annual volatility, market beta and base price,
plus a reference 24h volume used by the market analysis.

Tokens outside the table fall back to DEFAULT_PROFILE. Adding a token is
a data-only change.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class TokenProfile:
    """Reference scalars for one token."""
    expected_return: float
    volatility: float
    beta: float
    base_price: float


DEFAULT_PROFILE = TokenProfile(
    expected_return=0.10,
    volatility=0.35,
    beta=1.0,
    base_price=100.0,
)

DEFAULT_VOLUME_24H = 50_000_000.0

TOKEN_PROFILES: Mapping[str, TokenProfile] = MappingProxyType({
    "BTC": TokenProfile(expected_return=0.12, volatility=0.30, beta=0.8, base_price=42000.0),
    "ETH": TokenProfile(expected_return=0.15, volatility=0.25, beta=1.0, base_price=2500.0),
    "USDC": TokenProfile(expected_return=0.03, volatility=0.02, beta=0.1, base_price=1.0),
    "LINK": TokenProfile(expected_return=0.18, volatility=0.35, beta=1.2, base_price=15.0),
    "UNI": TokenProfile(expected_return=0.20, volatility=0.40, beta=1.3, base_price=8.0),
    "AAVE": TokenProfile(expected_return=0.16, volatility=0.38, beta=1.1, base_price=120.0),
})

REFERENCE_VOLUMES: Mapping[str, float] = MappingProxyType({
    "BTC": 8_000_000_000.0,
    "ETH": 2_000_000_000.0,
    "USDC": 5_000_000_000.0,
    "LINK": 500_000_000.0,
    "UNI": 200_000_000.0,
    "AAVE": 150_000_000.0,
})


def get_token_profile(token: str) -> TokenProfile:
    """Get reference profile for a token (default profile if unknown)."""
    return TOKEN_PROFILES.get(token, DEFAULT_PROFILE)


def get_expected_return(token: str) -> float:
    return get_token_profile(token).expected_return


def get_volatility(token: str) -> float:
    return get_token_profile(token).volatility


def get_beta(token: str) -> float:
    return get_token_profile(token).beta


def get_base_price(token: str) -> float:
    return get_token_profile(token).base_price


def get_reference_volume(token: str) -> float:
    return REFERENCE_VOLUMES.get(token, DEFAULT_VOLUME_24H)

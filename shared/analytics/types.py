"""
Data structures for the Analytics Engine.
Plain dataclasses so the kernel stays independent of the HTTP models.
"""
from dataclasses import dataclass, field
from typing import List


@dataclass
class PortfolioHolding:
    """
    One weighted position as seen by the kernel.

    weight: share of portfolio value in [0, 1]
    value: position value in USD
    """
    token: str
    weight: float
    value: float = 0.0
    amount: float = 0.0
    yield_apy: float = 0.0

    @classmethod
    def from_position(cls, position) -> 'PortfolioHolding':
        """Convert from any object exposing the position wire fields."""
        return cls(
            token=position.token,
            weight=float(position.weight),
            value=float(position.value),
            amount=float(position.amount),
            yield_apy=float(position.yield_apy),
        )


@dataclass
class PortfolioAnalysis:
    """Aggregate portfolio statistics used by the optimizer."""
    expected_return: float
    risk: float
    diversification: float
    concentration: float


@dataclass
class RebalanceAction:
    """A single rebalancing step."""
    type: str  # "buy", "sell", "rebalance"
    token: str
    amount: float
    target_weight: float
    priority: int

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "token": self.token,
            "amount": self.amount,
            "target_weight": self.target_weight,
            "priority": self.priority,
        }


@dataclass
class RebalancePlan:
    """Kernel output for a rebalance recommendation."""
    analysis: PortfolioAnalysis
    optimal_allocations: dict
    actions: List[RebalanceAction] = field(default_factory=list)
    confidence: float = 0.0
    reasoning: str = ""


@dataclass
class RiskReport:
    """Kernel output for risk metrics."""
    var_95: float
    var_99: float
    volatility: float
    sharpe_ratio: float
    max_drawdown: float
    beta: float


@dataclass
class TokenTechnicalAnalysis:
    """Per-token technical analysis."""
    token: str
    price: float
    volume_24h: float
    change_24h: float
    volatility: float
    support_level: float
    resistance_level: float
    trend: str  # "bullish", "bearish", "neutral"


@dataclass
class SentimentReading:
    """Aggregate market sentiment."""
    fear_greed_index: float
    bullish_sentiment: float
    bearish_sentiment: float
    neutral_sentiment: float

    @property
    def total(self) -> float:
        return self.bullish_sentiment + self.bearish_sentiment + self.neutral_sentiment


@dataclass
class MarketIndicatorReading:
    """Market-wide indicators derived from the snapshot cache."""
    fear_greed_index: float
    total_market_cap: float
    btc_dominance: float
    eth_dominance: float
    defi_tvl: float
    volatility: float

"""
Pydantic models for the AI Engine.
Request/Response models for API endpoints.

Request models default every field so that missing fields reach field
validation instead of failing at decode time.
"""
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class PortfolioPosition(BaseModel):
    """A weighted token position."""
    token: str = Field("", description="Token symbol, e.g. BTC")
    amount: float = Field(0.0, description="Token amount held")
    value: float = Field(0.0, description="Position value in USD")
    weight: float = Field(0.0, description="Share of portfolio value, 0 to 1")
    yield_apy: float = Field(0.0, description="Yield APY earned by the position")


class Portfolio(BaseModel):
    """Portfolio submitted for optimization or risk analysis."""
    id: str = Field("", description="Portfolio identifier")
    positions: List[PortfolioPosition] = Field(default_factory=list)
    total_value: float = Field(0.0, description="Total portfolio value in USD")
    last_updated: Optional[datetime] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": "p1",
                "positions": [
                    {"token": "BTC", "amount": 1, "value": 50000, "weight": 0.5, "yield_apy": 0},
                    {"token": "ETH", "amount": 20, "value": 50000, "weight": 0.5, "yield_apy": 0},
                ],
                "total_value": 100000,
            }
        }
    }


class RebalanceAction(BaseModel):
    """Single rebalancing step."""
    type: Literal["buy", "sell", "rebalance"]
    token: str
    amount: float = Field(..., ge=0, description="USD value to trade")
    target_weight: float
    priority: int = Field(..., ge=0)


class RebalanceRecommendation(BaseModel):
    """Response model for portfolio optimization."""
    portfolio_id: str
    timestamp: datetime
    confidence: float = Field(..., ge=0, le=1)
    expected_return: float
    risk: float
    actions: List[RebalanceAction]
    reasoning: str


class RiskMetrics(BaseModel):
    """Response model for risk metrics. VaR values are losses (<= 0)."""
    portfolio_id: str
    timestamp: datetime
    var_95: float
    var_99: float
    volatility: float = Field(..., ge=0)
    sharpe_ratio: float
    max_drawdown: float
    beta: float


class MarketAnalysisRequest(BaseModel):
    """Request model for market analysis."""
    tokens: List[str] = Field(default_factory=list, description="1 to 10 token symbols")
    timeframe: str = Field("", description="Analysis timeframe, defaults to 1d")


class TokenAnalysis(BaseModel):
    token: str
    price: float
    volume_24h: float
    change_24h: float
    volatility: float
    support_level: float
    resistance_level: float
    trend: Literal["bullish", "bearish", "neutral"]


class MarketSentiment(BaseModel):
    fear_greed_index: float = Field(..., ge=0, le=100)
    bullish_sentiment: float
    bearish_sentiment: float
    neutral_sentiment: float


class MarketAnalysis(BaseModel):
    """Response model for market analysis."""
    timestamp: datetime
    timeframe: str
    token_analysis: List[TokenAnalysis]
    sentiment: MarketSentiment


class MarketIndicators(BaseModel):
    """Response model for market-wide indicators."""
    fear_greed_index: float
    total_market_cap: float
    btc_dominance: float
    eth_dominance: float
    defi_tvl: float
    volatility: float
    timestamp: datetime


class PriceSnapshot(BaseModel):
    symbol: str
    price: float
    change_24h: float
    volume_24h: float
    market_cap: float
    source: str  # "coingecko" or "mock"
    timestamp: datetime


class PricesResponse(BaseModel):
    """Response model for cached prices."""
    prices: Dict[str, PriceSnapshot]
    last_update: Optional[datetime] = None
    timestamp: datetime


class YieldOpportunity(BaseModel):
    protocol: str
    token: str
    apy: float
    tvl: float
    risk: float = Field(..., ge=0, le=1)
    timestamp: datetime


class YieldOpportunitiesResponse(BaseModel):
    """Response model for yield opportunities."""
    opportunities: List[YieldOpportunity]
    count: int
    last_update: Optional[datetime] = None
    timestamp: datetime


class ServiceHealth(BaseModel):
    name: str
    status: Literal["healthy", "degraded", "unhealthy", "stopped"]
    response_time_ms: float = 0.0
    last_update: Optional[datetime] = None


class HealthResponse(BaseModel):
    """Response model for the health check."""
    status: str
    timestamp: datetime
    version: str
    uptime_seconds: float
    services: List[ServiceHealth]

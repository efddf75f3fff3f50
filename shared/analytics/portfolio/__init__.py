"""
Portfolio Module
Pure functions for portfolio analytics and rebalancing.
"""

from .portfolio_metrics import (
    analyze_portfolio,
    calculate_concentration,
    calculate_diversification,
    calculate_expected_return,
    calculate_portfolio_volatility,
    calculate_risk_metrics,
    calculate_var,
)
from .optimizer import (
    build_rebalance_plan,
    calculate_confidence,
    calculate_optimal_allocations,
    generate_rebalance_actions,
    generate_reasoning,
)

__all__ = [
    "analyze_portfolio",
    "calculate_concentration",
    "calculate_diversification",
    "calculate_expected_return",
    "calculate_portfolio_volatility",
    "calculate_risk_metrics",
    "calculate_var",
    "build_rebalance_plan",
    "calculate_confidence",
    "calculate_optimal_allocations",
    "generate_rebalance_actions",
    "generate_reasoning",
]

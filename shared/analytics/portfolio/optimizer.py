"""
Portfolio Optimizer
Risk-adjusted target allocation and rebalancing actions.

Steps:
1. Score every token in the portfolio: score = R / (sigma + 0.01)
2. Optimal weight = score / sum(score)
3. For every position with |optimal - current| > 0.02 emit an action
4. Sort actions by priority (highest first, stable)
5. Confidence from diversification, concentration and return/risk
"""
import math
from typing import Dict, List

from ..reference_data import get_expected_return, get_volatility
from ..types import PortfolioAnalysis, PortfolioHolding, RebalanceAction, RebalancePlan
from .portfolio_metrics import analyze_portfolio

SCORE_EPSILON = 0.01
REBALANCE_THRESHOLD = 0.02
TRADE_THRESHOLD = 0.1
ZERO_WEIGHT_EPSILON = 1e-9

BASE_CONFIDENCE = 0.7
DIVERSIFICATION_BONUS = 0.2
CONCENTRATION_LIMIT = 0.5
CONCENTRATION_PENALTY = 0.3
RETURN_RISK_THRESHOLD = 0.5
RETURN_RISK_BONUS = 0.1

WELL_BALANCED_REASONING = "Portfolio is well-balanced. No rebalancing needed at this time."


def calculate_optimal_allocations(holdings: List[PortfolioHolding]) -> Dict[str, float]:
    """
    Calculate optimal allocation using a Sharpe-like risk-adjusted score.

    Only tokens present in the portfolio are allocated.
    """
    scores: Dict[str, float] = {}
    total_score = 0.0

    for holding in holdings:
        score = get_expected_return(holding.token) / (get_volatility(holding.token) + SCORE_EPSILON)
        scores[holding.token] = score
        total_score += score

    if total_score <= 0:
        return {token: 0.0 for token in scores}

    return {token: score / total_score for token, score in scores.items()}


def _action_type(weight_diff: float) -> str:
    if weight_diff > TRADE_THRESHOLD:
        return "buy"
    if weight_diff < -TRADE_THRESHOLD:
        return "sell"
    return "rebalance"


def generate_rebalance_actions(
    holdings: List[PortfolioHolding],
    optimal_allocations: Dict[str, float],
    total_value: float,
) -> List[RebalanceAction]:
    """
    Generate rebalancing actions for positions that drift more than 2%.

    Amount is the USD value to trade: |diff| * value / weight, or
    |diff| * total_value when the position weight is (close to) zero.
    """
    actions: List[RebalanceAction] = []

    for holding in holdings:
        optimal_weight = optimal_allocations.get(holding.token, 0.0)
        weight_diff = optimal_weight - holding.weight
        abs_diff = abs(weight_diff)

        if abs_diff <= REBALANCE_THRESHOLD:
            continue

        if holding.weight < ZERO_WEIGHT_EPSILON:
            amount = abs_diff * total_value
        else:
            amount = abs_diff * holding.value / holding.weight

        actions.append(RebalanceAction(
            type=_action_type(weight_diff),
            token=holding.token,
            amount=abs(amount),
            target_weight=optimal_weight,
            priority=math.floor(abs_diff * 100),
        ))

    # list.sort is stable, ties keep insertion order
    actions.sort(key=lambda action: action.priority, reverse=True)
    return actions


def calculate_confidence(analysis: PortfolioAnalysis) -> float:
    """Confidence in the recommendation, clamped to [0, 1]."""
    confidence = BASE_CONFIDENCE
    confidence += analysis.diversification * DIVERSIFICATION_BONUS

    if analysis.concentration > CONCENTRATION_LIMIT:
        confidence -= (analysis.concentration - CONCENTRATION_LIMIT) * CONCENTRATION_PENALTY

    if analysis.risk > 0 and analysis.expected_return / analysis.risk > RETURN_RISK_THRESHOLD:
        confidence += RETURN_RISK_BONUS

    return max(0.0, min(confidence, 1.0))


def generate_reasoning(analysis: PortfolioAnalysis, actions: List[RebalanceAction]) -> str:
    """Human-readable explanation, chosen deterministically."""
    if not actions:
        return WELL_BALANCED_REASONING

    reasoning = "Portfolio analysis suggests rebalancing to improve risk-adjusted returns. "

    if analysis.concentration > 0.6:
        reasoning += "High concentration detected - diversification recommended. "

    if analysis.diversification > 0.8:
        reasoning += "Good diversification maintained. "

    if len(actions) > 3:
        reasoning += "Multiple adjustments needed for optimal allocation."
    else:
        reasoning += "Minor adjustments will optimize performance."

    return reasoning


def build_rebalance_plan(holdings: List[PortfolioHolding], total_value: float) -> RebalancePlan:
    """Run the full optimization pipeline for a portfolio."""
    analysis = analyze_portfolio(holdings)
    optimal_allocations = calculate_optimal_allocations(holdings)
    actions = generate_rebalance_actions(holdings, optimal_allocations, total_value)

    return RebalancePlan(
        analysis=analysis,
        optimal_allocations=optimal_allocations,
        actions=actions,
        confidence=calculate_confidence(analysis),
        reasoning=generate_reasoning(analysis, actions),
    )

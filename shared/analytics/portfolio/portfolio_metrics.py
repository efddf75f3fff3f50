"""
Portfolio Metrics

Metrics:
1. Concentration (HHI): sum(weight_i^2)
2. Diversification: 1 - HHI
3. Expected return: sum(weight_i * R_i) with R_i from the token reference table
4. Risk: sqrt(sum(weight_i^2 * sigma_i^2)) * (1 - 0.3 * diversification)
5. Portfolio volatility: own variance plus pairwise terms at a fixed correlation
6. VaR (1-day, normal assumption), Sharpe ratio, max drawdown estimate, beta

Weights are used as supplied; they are not renormalised when they do not sum to 1.
"""
import math
from typing import List

from shared.error_models import EmptyPortfolioError
from ..reference_data import get_beta, get_expected_return, get_volatility
from ..types import PortfolioAnalysis, PortfolioHolding, RiskReport

CORRELATION_FACTOR = 0.3  # single scalar correlation between crypto assets
RISK_FREE_RATE = 0.02
DIVERSIFICATION_RISK_DISCOUNT = 0.3
MAX_DRAWDOWN_MULTIPLIER = 2.5
TRADING_DAYS_PER_YEAR = 365.0

Z_SCORES = {
    0.95: 1.645,
    0.99: 2.326,
}
DEFAULT_Z_SCORE = 1.96


def calculate_concentration(holdings: List[PortfolioHolding]) -> float:
    """
    Calculate concentration using the Herfindahl-Hirschman Index.

    Formula: HHI = sum(weight_i^2)
    """
    return sum(h.weight * h.weight for h in holdings)


def calculate_diversification(holdings: List[PortfolioHolding]) -> float:
    """Diversification = 1 - HHI."""
    return 1.0 - calculate_concentration(holdings)


def calculate_expected_return(holdings: List[PortfolioHolding]) -> float:
    """Weighted expected annual return."""
    return sum(h.weight * get_expected_return(h.token) for h in holdings)


def analyze_portfolio(holdings: List[PortfolioHolding]) -> PortfolioAnalysis:
    """
    Compute concentration, diversification, expected return and risk.

    Risk ignores cross terms and is discounted by 30% of the
    diversification score as a simple correlation adjustment.
    """
    concentration = calculate_concentration(holdings)
    diversification = 1.0 - concentration

    raw_variance = 0.0
    for holding in holdings:
        sigma = get_volatility(holding.token)
        raw_variance += holding.weight * holding.weight * sigma * sigma

    risk = math.sqrt(raw_variance) * (1.0 - diversification * DIVERSIFICATION_RISK_DISCOUNT)

    return PortfolioAnalysis(
        expected_return=calculate_expected_return(holdings),
        risk=risk,
        diversification=diversification,
        concentration=concentration,
    )


def calculate_portfolio_volatility(holdings: List[PortfolioHolding]) -> float:
    """
    Calculate annual portfolio volatility.

    Variance = sum(w_i^2 * s_i^2) + sum over ordered pairs i != j of
    2 * w_i * w_j * s_i * s_j * rho, with rho = 0.3.
    """
    sigmas = [get_volatility(h.token) for h in holdings]

    total_variance = 0.0
    for holding, sigma in zip(holdings, sigmas):
        total_variance += holding.weight * holding.weight * sigma * sigma

    for i, first in enumerate(holdings):
        for j, second in enumerate(holdings):
            if i != j:
                total_variance += (
                    2 * first.weight * second.weight * sigmas[i] * sigmas[j] * CORRELATION_FACTOR
                )

    return math.sqrt(total_variance)


def calculate_var(volatility: float, confidence: float) -> float:
    """
    Calculate 1-day Value at Risk as a fraction of portfolio value.

    Reported as a loss, so the result is <= 0 and more negative at
    higher confidence.
    """
    z_score = Z_SCORES.get(confidence, DEFAULT_Z_SCORE)
    return -(z_score * volatility * math.sqrt(1.0 / TRADING_DAYS_PER_YEAR))


def calculate_sharpe_ratio(holdings: List[PortfolioHolding], volatility: float) -> float:
    """Sharpe ratio against a 2% risk-free rate; 0 when volatility is 0."""
    if volatility == 0:
        return 0.0
    excess_return = calculate_expected_return(holdings) - RISK_FREE_RATE
    return excess_return / volatility


def estimate_max_drawdown(volatility: float) -> float:
    """Rough max drawdown estimate: 2.5x annual volatility."""
    return volatility * MAX_DRAWDOWN_MULTIPLIER


def calculate_beta(holdings: List[PortfolioHolding]) -> float:
    """Weighted beta relative to the crypto market."""
    return sum(h.weight * get_beta(h.token) for h in holdings)


def calculate_risk_metrics(holdings: List[PortfolioHolding]) -> RiskReport:
    """
    Calculate the full risk metric family for a portfolio.

    Raises:
        EmptyPortfolioError: if there are no positions
    """
    if not holdings:
        raise EmptyPortfolioError("portfolio has no positions")

    volatility = calculate_portfolio_volatility(holdings)

    return RiskReport(
        var_95=calculate_var(volatility, 0.95),
        var_99=calculate_var(volatility, 0.99),
        volatility=volatility,
        sharpe_ratio=calculate_sharpe_ratio(holdings, volatility),
        max_drawdown=estimate_max_drawdown(volatility),
        beta=calculate_beta(holdings),
    )

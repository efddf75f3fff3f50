"""
Request validation for the AI Engine.
Field checks run after decoding so that every violation is reported as a
ValidationError naming the offending field.
"""
from typing import List

from .config import settings
from .error_models import TooManyTokensError, ValidationError


def validate_weight(weight: float) -> float:
    if not 0 <= weight <= 1:
        raise ValueError("weight must be between 0 and 1")
    return weight


def validate_portfolio(portfolio) -> None:
    """
    Validate a decoded portfolio.

    Checks, in order: id, positions, then per position token and weight.
    The first violation is raised.

    Raises:
        ValidationError: with field "id", "positions",
            "positions[i].token" or "positions[i].weight"
    """
    if not portfolio.id:
        raise ValidationError("id", "portfolio ID is required")

    if not portfolio.positions:
        raise ValidationError("positions", "at least one position is required")

    for i, position in enumerate(portfolio.positions):
        if not position.token:
            raise ValidationError(f"positions[{i}].token", "token is required")
        try:
            validate_weight(position.weight)
        except ValueError as e:
            raise ValidationError(f"positions[{i}].weight", str(e)) from e


def validate_analysis_tokens(tokens: List[str]) -> None:
    """
    Validate the market-analysis token list.

    Raises:
        ValidationError: no tokens
        TooManyTokensError: more than MAX_ANALYSIS_TOKENS tokens
    """
    if not tokens:
        raise ValidationError("tokens", "At least one token is required")

    if len(tokens) > settings.MAX_ANALYSIS_TOKENS:
        raise TooManyTokensError(
            f"Maximum {settings.MAX_ANALYSIS_TOKENS} tokens allowed",
            field="tokens",
        )

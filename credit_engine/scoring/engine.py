"""
Risk Score Engine

Turns a borrower's collateral and reputation into a bounded integer score.

SCORING METHODOLOGY:
--------------------
Three factors are normalised to 0-100 and combined with relative weights:

1. Collateral Score (0-100)
   collateral * 100 // 10000, capped at 100. Posting 10000 units or more
   earns the full score.

2. History Score (0-100)
   Taken as stored on the profile. Starts at 50 and drops by 20 on each
   liquidation.

3. Repayment Score (0-100)
   repayments * 10, capped at 100. Ten repayments earn the full score.

The weighted sum is divided by 100 and a flat penalty of 20 points per
default is subtracted, flooring at zero.

WEIGHTS:
--------
Weights are relative and are NOT required to sum to 100. With weights
summing to 100 the result stays within 0-100; operators may deliberately
skew the scale when tuning the model.

Every division is integer floor division. Scores are compared against
fixed tier boundaries downstream, so the truncation has to be exact.
"""
from dataclasses import dataclass

COLLATERAL_CAP = 10000
REPAYMENT_POINTS = 10
DEFAULT_PENALTY_POINTS = 20
MAX_COMPONENT_SCORE = 100


@dataclass(frozen=True)
class ModelWeights:
    """Relative weights applied to each scoring factor."""
    collateral: int
    history: int
    repayment: int


@dataclass(frozen=True)
class ScoreBreakdown:
    """Final score with the intermediate values that produced it."""
    collateral_score: int
    history_score: int
    repayment_score: int
    default_penalty: int
    weighted_sum: int
    normalized: int
    total_score: int


def explain_score(
    collateral: int,
    history: int,
    repayments: int,
    defaults: int,
    weights: ModelWeights,
) -> ScoreBreakdown:
    """
    Compute the score and keep every intermediate value.

    Args:
        collateral: Posted collateral units
        history: Profile history score (0-100)
        repayments: Number of successful repayments
        defaults: Number of liquidations
        weights: Model weights from governance

    Returns:
        ScoreBreakdown whose total_score equals score(...) for the same inputs

    Example:
        >>> explain_score(10000, 80, 5, 0, ModelWeights(30, 40, 30)).total_score
        77
    """
    collateral_score = min(MAX_COMPONENT_SCORE, collateral * 100 // COLLATERAL_CAP)
    repayment_score = min(MAX_COMPONENT_SCORE, repayments * REPAYMENT_POINTS)
    default_penalty = defaults * DEFAULT_PENALTY_POINTS

    weighted_sum = (
        collateral_score * weights.collateral
        + history * weights.history
        + repayment_score * weights.repayment
    )
    normalized = weighted_sum // 100

    # Penalty floors at zero rather than going negative
    total = normalized - default_penalty if normalized > default_penalty else 0

    return ScoreBreakdown(
        collateral_score=collateral_score,
        history_score=history,
        repayment_score=repayment_score,
        default_penalty=default_penalty,
        weighted_sum=weighted_sum,
        normalized=normalized,
        total_score=total,
    )


def score(
    collateral: int,
    history: int,
    repayments: int,
    defaults: int,
    weights: ModelWeights,
) -> int:
    """Return the raw risk score. Pure and deterministic."""
    return explain_score(collateral, history, repayments, defaults, weights).total_score

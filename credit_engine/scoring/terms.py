"""
Loan Terms Mapping

Maps a qualifying raw score to the terms of a loan: the market-adjusted
score, the interest rate tier, the duration tier and the maximum amount.

MARKET ADJUSTMENT:
------------------
The market risk factor is a scaled safety margin where 10 is neutral.
Above the baseline every qualifying score loses a flat 10 points (floored
at zero). At or below the baseline the score is used as is.

RATE TIERS:
-----------
- Score > 80: 2%
- Score > 60: 5%
- Otherwise:  8%

DURATION TIERS:
---------------
- Score > 75: 1000 height units
- Otherwise:  500 height units

Boundaries are strict: a score of exactly 80, 75 or 60 falls into the
lower tier.

MAXIMUM LOAN:
-------------
collateral * score // 100, so a borrower never receives more than the
share of their collateral their adjusted score allows.
"""
from dataclasses import dataclass

from credit_engine.arithmetic import saturating_sub
from credit_engine.logging import get_logger

logger = get_logger(__name__)

MARKET_RISK_BASELINE = 10
MARKET_RISK_MARGIN = 10

# (exclusive lower bound, rate percent), highest first
RATE_TIERS = [
    (80, 2),
    (60, 5),
]
DEFAULT_RATE = 8

LONG_DURATION_THRESHOLD = 75
LONG_DURATION = 1000
SHORT_DURATION = 500


@dataclass(frozen=True)
class LoanTerms:
    """Terms offered for a qualifying score."""
    adjusted_score: int
    interest_rate: int
    duration: int
    max_loan: int


def adjust_for_market(raw_score: int, market_risk_factor: int) -> int:
    """Apply the market safety margin when the factor is above baseline."""
    if market_risk_factor > MARKET_RISK_BASELINE:
        return saturating_sub(raw_score, MARKET_RISK_MARGIN)
    return raw_score


def interest_rate_for(score: int) -> int:
    """
    Map an adjusted score to an interest rate percentage.

    Example:
        >>> interest_rate_for(81)
        2
        >>> interest_rate_for(80)
        5
        >>> interest_rate_for(60)
        8
    """
    for threshold, rate in RATE_TIERS:
        if score > threshold:
            return rate
    return DEFAULT_RATE


def duration_for(score: int) -> int:
    """Map an adjusted score to a loan duration in height units."""
    return LONG_DURATION if score > LONG_DURATION_THRESHOLD else SHORT_DURATION


def max_loan_for(collateral: int, score: int) -> int:
    """Largest principal the collateral supports at this score."""
    return collateral * score // 100


def derive_terms(raw_score: int, market_risk_factor: int, collateral: int) -> LoanTerms:
    """
    Derive the full set of terms for a qualifying raw score.

    Args:
        raw_score: Output of the scoring engine (already above threshold)
        market_risk_factor: Current governance market factor
        collateral: Borrower's posted collateral

    Returns:
        LoanTerms for the adjusted score
    """
    adjusted = adjust_for_market(raw_score, market_risk_factor)
    terms = LoanTerms(
        adjusted_score=adjusted,
        interest_rate=interest_rate_for(adjusted),
        duration=duration_for(adjusted),
        max_loan=max_loan_for(collateral, adjusted),
    )
    logger.debug(
        "loan_terms_derived",
        raw_score=raw_score,
        adjusted_score=adjusted,
        market_risk_factor=market_risk_factor,
        interest_rate=terms.interest_rate,
        duration=terms.duration,
        max_loan=terms.max_loan,
    )
    return terms

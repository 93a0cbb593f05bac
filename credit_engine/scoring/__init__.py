"""Risk scoring and loan term derivation."""
from credit_engine.scoring.engine import ModelWeights, ScoreBreakdown, explain_score, score
from credit_engine.scoring.terms import LoanTerms, derive_terms

__all__ = [
    "ModelWeights",
    "ScoreBreakdown",
    "explain_score",
    "score",
    "LoanTerms",
    "derive_terms",
]

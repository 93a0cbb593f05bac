"""Tests for market adjustment and loan term tiers."""
from credit_engine.scoring.terms import (
    adjust_for_market,
    derive_terms,
    duration_for,
    interest_rate_for,
    max_loan_for,
)


class TestMarketAdjustment:
    """Test the market safety margin."""

    def test_neutral_factor_leaves_score(self):
        assert adjust_for_market(77, 10) == 77
        assert adjust_for_market(77, 0) == 77

    def test_elevated_factor_subtracts_margin(self):
        assert adjust_for_market(77, 11) == 67
        assert adjust_for_market(77, 15) == 67

    def test_margin_floors_at_zero(self):
        assert adjust_for_market(4, 20) == 0
        assert adjust_for_market(10, 20) == 0


class TestTiers:
    """Rate and duration boundaries are strictly greater-than."""

    def test_interest_rate_boundaries(self):
        assert interest_rate_for(100) == 2
        assert interest_rate_for(81) == 2
        assert interest_rate_for(80) == 5
        assert interest_rate_for(61) == 5
        assert interest_rate_for(60) == 8
        assert interest_rate_for(0) == 8

    def test_duration_boundaries(self):
        assert duration_for(76) == 1000
        assert duration_for(75) == 500
        assert duration_for(0) == 500

    def test_max_loan_floors(self):
        assert max_loan_for(10000, 67) == 6700
        assert max_loan_for(333, 50) == 166
        assert max_loan_for(0, 100) == 0


class TestDeriveTerms:
    """Test the combined term derivation."""

    def test_elevated_market(self):
        terms = derive_terms(77, 15, 10000)

        assert terms.adjusted_score == 67
        assert terms.interest_rate == 5
        assert terms.duration == 500
        assert terms.max_loan == 6700

    def test_neutral_market_high_score(self):
        terms = derive_terms(90, 10, 2000)

        assert terms.adjusted_score == 90
        assert terms.interest_rate == 2
        assert terms.duration == 1000
        assert terms.max_loan == 1800

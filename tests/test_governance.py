"""Tests for governance configuration and the circuit breaker."""
import pytest

from credit_engine.errors import Unauthorized
from tests.conftest import OPERATOR


class TestGovernanceDefaults:
    """The record is created with documented defaults on first read."""

    def test_defaults(self, governance):
        config = governance.get_config()

        assert config.operator == OPERATOR
        assert (config.weight_collateral, config.weight_history, config.weight_repayment) == (30, 40, 30)
        assert config.risk_threshold == 50
        assert config.market_risk_factor == 10
        assert config.paused is False
        assert config.next_loan_id == 1

    def test_single_record(self, db, governance):
        assert governance.get_config() is governance.get_config()


class TestOperatorOnly:
    """Every setter requires the operator."""

    def test_set_paused_requires_operator(self, governance):
        with pytest.raises(Unauthorized):
            governance.set_paused("mallory", True)
        assert governance.get_config().paused is False

    def test_set_model_weights_requires_operator(self, governance):
        with pytest.raises(Unauthorized):
            governance.set_model_weights("mallory", 1, 2, 3, 4)
        assert governance.get_config().weight_collateral == 30

    def test_update_market_risk_requires_operator(self, governance):
        with pytest.raises(Unauthorized):
            governance.update_market_risk("mallory", 99)
        assert governance.get_config().market_risk_factor == 10


class TestOverwrites:
    """Setters overwrite without range validation."""

    def test_set_model_weights(self, governance):
        config = governance.set_model_weights(OPERATOR, 70, 70, 70, 95)

        assert config.weight_collateral == 70
        assert config.weight_history == 70
        assert config.weight_repayment == 70
        assert config.risk_threshold == 95
        assert governance.weights().history == 70

    def test_update_market_risk(self, governance):
        assert governance.update_market_risk(OPERATOR, 15).market_risk_factor == 15
        assert governance.update_market_risk(OPERATOR, 0).market_risk_factor == 0

    def test_pause_and_resume(self, governance):
        governance.set_paused(OPERATOR, True)
        assert governance.get_config().paused is True

        governance.set_paused(OPERATOR, False)
        assert governance.get_config().paused is False


class TestIsOperational:
    """The pause flag blocks everyone except the operator."""

    def test_running(self, governance):
        assert governance.is_operational("alice") is True
        assert governance.is_operational(OPERATOR) is True

    def test_paused(self, governance):
        governance.set_paused(OPERATOR, True)

        assert governance.is_operational("alice") is False
        assert governance.is_operational(OPERATOR) is True


class TestLoanIdAllocation:
    def test_ids_strictly_increase(self, db, governance):
        ids = [governance.allocate_loan_id() for _ in range(5)]
        db.commit()

        assert ids == [1, 2, 3, 4, 5]
        assert governance.get_config().next_loan_id == 6

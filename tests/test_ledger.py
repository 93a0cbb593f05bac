"""Tests for loan records and status transitions."""
import pytest

from credit_engine.arithmetic import MAX_UINT
from credit_engine.errors import ArithmeticOverflow, LoanNotActive, LoanNotFound
from credit_engine.models import LoanStatus


class TestCreate:
    """Test loan creation."""

    def test_fields(self, db, ledger):
        loan_id = ledger.create("alice", 5000, 5, 500, 120)
        db.commit()

        loan = ledger.get(loan_id)
        assert loan_id == 1
        assert loan.borrower == "alice"
        assert loan.amount == 5000
        assert loan.interest_rate == 5
        assert loan.start_height == 120
        assert loan.due_height == 620
        assert loan.status == LoanStatus.ACTIVE.value

    def test_ids_are_sequential(self, db, ledger):
        ids = [ledger.create(f"user-{i}", 100, 8, 500, 0) for i in range(3)]
        db.commit()
        assert ids == [1, 2, 3]

    def test_due_height_overflow(self, db, ledger, governance):
        with pytest.raises(ArithmeticOverflow):
            ledger.create("alice", 100, 8, 500, MAX_UINT)
        db.rollback()
        assert governance.get_config().next_loan_id == 1

    def test_get_missing(self, ledger):
        assert ledger.get(42) is None
        with pytest.raises(LoanNotFound):
            ledger.require(42)


class TestTransitions:
    """Only ACTIVE loans can move to a terminal state."""

    def test_mark_repaid(self, db, ledger):
        loan_id = ledger.create("alice", 100, 8, 500, 0)
        assert ledger.mark_repaid(loan_id).status == LoanStatus.REPAID.value

    def test_mark_liquidated(self, db, ledger):
        loan_id = ledger.create("alice", 100, 8, 500, 0)
        assert ledger.mark_liquidated(loan_id).status == LoanStatus.LIQUIDATED.value

    def test_terminal_status_is_not_overwritten(self, db, ledger):
        loan_id = ledger.create("alice", 100, 8, 500, 0)
        ledger.mark_repaid(loan_id)

        with pytest.raises(LoanNotActive):
            ledger.mark_liquidated(loan_id)
        with pytest.raises(LoanNotActive):
            ledger.mark_repaid(loan_id)
        assert ledger.get(loan_id).status == LoanStatus.REPAID.value

    def test_missing_loan(self, ledger):
        with pytest.raises(LoanNotFound):
            ledger.mark_repaid(7)
        with pytest.raises(LoanNotFound):
            ledger.mark_liquidated(7)

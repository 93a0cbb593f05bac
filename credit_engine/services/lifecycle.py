"""Loan lifecycle service: repayment and liquidation transitions."""
from typing import Optional

from sqlalchemy.orm import Session

from credit_engine.database import atomic
from credit_engine.errors import LoanNotDefaulted, LoanNotFound
from credit_engine.logging import get_logger
from credit_engine.models import BorrowerProfile, Loan
from credit_engine.schemas import LiquidationResponse, RepaymentResponse
from credit_engine.services.governance import GovernanceService
from credit_engine.services.ledger import LoanLedger
from credit_engine.services.registry import BorrowerRegistry

logger = get_logger(__name__)


class LoanLifecycleService:
    """
    Moves a borrower's active loan into a terminal state.

    Both transitions resolve the loan through the profile's active link,
    so a second call after the link is cleared fails with LoanNotFound.
    The profile link and the loan status always change together.
    """

    def __init__(
        self,
        db: Session,
        governance: Optional[GovernanceService] = None,
        registry: Optional[BorrowerRegistry] = None,
        ledger: Optional[LoanLedger] = None,
    ):
        self.db = db
        self.governance = governance or GovernanceService(db)
        self.registry = registry or BorrowerRegistry(db, self.governance)
        self.ledger = ledger or LoanLedger(db, self.governance)

    def _active_loan(self, account: str) -> tuple[BorrowerProfile, Loan]:
        profile = self.registry.require_profile(account)
        if profile.active_loan_id is None:
            raise LoanNotFound(f"{account} has no active loan")
        return profile, self.ledger.require(profile.active_loan_id)

    def repay(self, caller: str) -> RepaymentResponse:
        """
        Close the caller's active loan as repaid.

        Raises:
            UnknownBorrower: Caller has no profile
            LoanNotFound: No active loan, or its record is missing
            Paused: System paused and caller is not the operator
        """
        with atomic(self.db):
            profile, loan = self._active_loan(caller)
            self.governance.require_operational(caller)

            self.ledger.mark_repaid(loan.id)
            self.registry.clear_loan(caller)
            self.registry.record_repayment(caller)

            response = RepaymentResponse(
                loan_id=loan.id,
                status=loan.status,
                repayment_count=profile.repayment_count,
            )

        logger.info(
            "loan_repaid",
            account_id=caller,
            loan_id=response.loan_id,
            repayment_count=response.repayment_count,
        )
        return response

    def liquidate(self, caller: str, borrower: str, current_height: int) -> LiquidationResponse:
        """
        Force-close an overdue loan. Operator only.

        Args:
            caller: Must be the operator
            borrower: Account whose active loan is liquidated
            current_height: Ledger height, must be past the loan's due height

        Raises:
            Unauthorized: Caller is not the operator
            UnknownBorrower: Borrower has no profile
            LoanNotFound: No active loan, or its record is missing
            LoanNotDefaulted: Due height has not yet passed
        """
        with atomic(self.db):
            self.governance.require_operator(caller)
            profile, loan = self._active_loan(borrower)
            if current_height <= loan.due_height:
                raise LoanNotDefaulted(
                    f"loan {loan.id} is due at height {loan.due_height}, current height {current_height}"
                )

            self.ledger.mark_liquidated(loan.id)
            self.registry.clear_loan(borrower)
            self.registry.record_default(borrower)

            response = LiquidationResponse(
                loan_id=loan.id,
                borrower=borrower,
                status=loan.status,
                history_score=profile.history_score,
                default_count=profile.default_count,
            )

        logger.info(
            "loan_liquidated",
            borrower=borrower,
            loan_id=response.loan_id,
            current_height=current_height,
            history_score=response.history_score,
            default_count=response.default_count,
        )
        return response

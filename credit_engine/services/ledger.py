"""Loan ledger: loan records and their status transitions."""
from typing import Optional

from sqlalchemy.orm import Session

from credit_engine.arithmetic import checked_add
from credit_engine.errors import LoanNotActive, LoanNotFound
from credit_engine.logging import get_logger
from credit_engine.models import Loan, LoanStatus
from credit_engine.services.governance import GovernanceService

logger = get_logger(__name__)


class LoanLedger:
    """
    Stores loans keyed by a monotonically increasing id.

    Mutators run inside the caller's unit of work. Status transitions are
    only allowed out of ACTIVE; a terminal loan is never overwritten.
    """

    def __init__(self, db: Session, governance: Optional[GovernanceService] = None):
        self.db = db
        self.governance = governance or GovernanceService(db)

    def get(self, loan_id: int) -> Optional[Loan]:
        return self.db.get(Loan, loan_id)

    def require(self, loan_id: int) -> Loan:
        loan = self.get(loan_id)
        if loan is None:
            raise LoanNotFound(f"loan {loan_id} not found")
        return loan

    def create(
        self,
        borrower: str,
        amount: int,
        interest_rate: int,
        duration: int,
        current_height: int,
    ) -> int:
        """
        Insert a new ACTIVE loan.

        Args:
            borrower: Account receiving the loan
            amount: Approved principal
            interest_rate: Rate percentage from the tier table
            duration: Height units until the loan is due
            current_height: Ledger height at issuance

        Returns:
            The new loan id
        """
        due_height = checked_add(current_height, duration, "due_height")
        loan_id = self.governance.allocate_loan_id()
        loan = Loan(
            id=loan_id,
            borrower=borrower,
            amount=amount,
            interest_rate=interest_rate,
            start_height=current_height,
            due_height=due_height,
            status=LoanStatus.ACTIVE.value,
        )
        self.db.add(loan)
        self.db.flush()

        logger.info(
            "loan_created",
            loan_id=loan_id,
            borrower=borrower,
            amount=amount,
            interest_rate=interest_rate,
            start_height=current_height,
            due_height=due_height,
        )
        return loan_id

    def mark_repaid(self, loan_id: int) -> Loan:
        return self._transition(loan_id, LoanStatus.REPAID)

    def mark_liquidated(self, loan_id: int) -> Loan:
        return self._transition(loan_id, LoanStatus.LIQUIDATED)

    def _transition(self, loan_id: int, status: LoanStatus) -> Loan:
        loan = self.require(loan_id)
        if loan.status != LoanStatus.ACTIVE.value:
            raise LoanNotActive(f"loan {loan_id} is already {loan.status}")
        loan.status = status.value
        return loan

"""Assessment service: score a borrower and issue a loan when it fits."""
import time
from typing import Optional

from sqlalchemy.orm import Session

from credit_engine import metrics
from credit_engine.database import atomic
from credit_engine.errors import LoanAlreadyActive
from credit_engine.logging import get_logger
from credit_engine.models import BorrowerProfile
from credit_engine.schemas import (
    AssessmentResponse, AssessmentStatus,
    ScoreComponents, ScorePreviewResponse,
)
from credit_engine.scoring import ScoreBreakdown, derive_terms, explain_score
from credit_engine.services.governance import GovernanceService
from credit_engine.services.ledger import LoanLedger
from credit_engine.services.registry import BorrowerRegistry

logger = get_logger(__name__)


class AssessmentService:
    """
    Service for assessing borrowers and issuing loans.

    This service orchestrates:
    1. Checking the circuit breaker and the borrower's standing
    2. Scoring the profile with the current governance weights
    3. Applying the market margin and tiering rate and duration
    4. Creating and linking the loan when the request fits the limit

    Only a full approval writes state. Rejections and partial approvals
    are returned as results, never raised.
    """

    def __init__(
        self,
        db: Session,
        governance: Optional[GovernanceService] = None,
        registry: Optional[BorrowerRegistry] = None,
        ledger: Optional[LoanLedger] = None,
    ):
        """
        Initialize the assessment service.

        Args:
            db: SQLAlchemy database session
            governance: Governance service (defaults to one on the same session)
            registry: Borrower registry (defaults to one on the same session)
            ledger: Loan ledger (defaults to one on the same session)
        """
        self.db = db
        self.governance = governance or GovernanceService(db)
        self.registry = registry or BorrowerRegistry(db, self.governance)
        self.ledger = ledger or LoanLedger(db, self.governance)

    def _score_profile(self, profile: BorrowerProfile) -> ScoreBreakdown:
        start = time.perf_counter()
        breakdown = explain_score(
            profile.collateral,
            profile.history_score,
            profile.repayment_count,
            profile.default_count,
            self.governance.weights(),
        )
        metrics.record_scoring_latency(time.perf_counter() - start)
        return breakdown

    def assess_and_issue(
        self,
        caller: str,
        requested_amount: int,
        current_height: int,
    ) -> AssessmentResponse:
        """
        Assess the caller and issue a loan if the request fits.

        Args:
            caller: Account requesting the loan
            requested_amount: Principal requested
            current_height: Ledger height used to stamp a new loan

        Returns:
            AssessmentResponse tagged APPROVED, PARTIAL_APPROVAL or REJECTED

        Raises:
            Paused: System paused and caller is not the operator
            UnknownBorrower: Caller has no profile
            LoanAlreadyActive: Caller already has an outstanding loan
        """
        with atomic(self.db):
            self.governance.require_operational(caller)
            profile = self.registry.require_profile(caller)
            if profile.active_loan_id is not None:
                raise LoanAlreadyActive(
                    f"{caller} already has loan {profile.active_loan_id}"
                )

            config = self.governance.get_config()
            breakdown = self._score_profile(profile)
            raw_score = breakdown.total_score

            logger.info(
                "borrower_scored",
                account_id=caller,
                raw_score=raw_score,
                risk_threshold=config.risk_threshold,
                collateral_score=breakdown.collateral_score,
                repayment_score=breakdown.repayment_score,
                default_penalty=breakdown.default_penalty,
            )

            if raw_score < config.risk_threshold:
                return AssessmentResponse(
                    status=AssessmentStatus.REJECTED,
                    risk_score=raw_score,
                    approved_amount=0,
                )

            terms = derive_terms(raw_score, config.market_risk_factor, profile.collateral)

            if requested_amount > terms.max_loan:
                return AssessmentResponse(
                    status=AssessmentStatus.PARTIAL_APPROVAL,
                    risk_score=terms.adjusted_score,
                    interest_rate=terms.interest_rate,
                    approved_amount=terms.max_loan,
                    duration=0,
                )

            loan_id = self.ledger.create(
                caller,
                requested_amount,
                terms.interest_rate,
                terms.duration,
                current_height,
            )
            self.registry.link_loan(caller, loan_id)

        return AssessmentResponse(
            status=AssessmentStatus.APPROVED,
            loan_id=loan_id,
            risk_score=terms.adjusted_score,
            interest_rate=terms.interest_rate,
            approved_amount=requested_amount,
            duration=terms.duration,
        )

    def preview_score(self, account: str) -> ScorePreviewResponse:
        """
        Show what an assessment would compute right now, without writing.

        Terms are only filled in when the raw score meets the threshold.
        """
        profile = self.registry.require_profile(account)
        config = self.governance.get_config()
        breakdown = self._score_profile(profile)
        qualifies = breakdown.total_score >= config.risk_threshold

        preview = ScorePreviewResponse(
            account=account,
            raw_score=breakdown.total_score,
            qualifies=qualifies,
            risk_threshold=config.risk_threshold,
            components=ScoreComponents(
                collateral_score=breakdown.collateral_score,
                history_score=breakdown.history_score,
                repayment_score=breakdown.repayment_score,
                default_penalty=breakdown.default_penalty,
                weighted_sum=breakdown.weighted_sum,
                normalized=breakdown.normalized,
            ),
        )
        if qualifies:
            terms = derive_terms(breakdown.total_score, config.market_risk_factor, profile.collateral)
            preview.adjusted_score = terms.adjusted_score
            preview.interest_rate = terms.interest_rate
            preview.duration = terms.duration
            preview.max_loan = terms.max_loan
        return preview

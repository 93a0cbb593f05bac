"""API route handlers for the credit engine."""
import time
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.orm import Session

from credit_engine import metrics
from credit_engine.database import get_db
from credit_engine.logging import get_logger, set_request_context, log_assessment
from credit_engine.schemas import (
    AssessmentRequest, AssessmentResponse, AssessmentStatus,
    CollateralRequest, RegisterRequest, ProfileResponse, ScorePreviewResponse,
    LiquidationRequest, LiquidationResponse, RepaymentResponse, LoanResponse,
    GovernanceResponse, MarketRiskRequest, ModelWeightsRequest, PauseRequest,
)
from credit_engine.services import (
    AssessmentService, BorrowerRegistry, GovernanceService, HeightSource,
    LoanLedger, LoanLifecycleService, WebhookService, build_height_source,
)
from credit_engine.services.webhook import LOAN_ISSUED, LOAN_LIQUIDATED, LOAN_REPAID

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["credit"])

_height_source: Optional[HeightSource] = None


def get_height_source() -> HeightSource:
    """Dependency that provides the configured ledger height source."""
    global _height_source
    if _height_source is None:
        _height_source = build_height_source()
    return _height_source


def get_caller(
    request: Request,
    x_account_id: str = Header(..., alias="X-Account-ID", min_length=1),
) -> str:
    """Dependency that resolves the calling account from the identity header."""
    request_id = getattr(request.state, "request_id", "unknown")
    set_request_context(request_id, account_id=x_account_id)
    return x_account_id


async def _notify_settlement(db: Session, event_type: str, payload: dict) -> None:
    """Send a loan event to settlement. Failures never fail the request."""
    webhook_start = time.perf_counter()
    try:
        delivered = await WebhookService(db).send_loan_event(event_type, payload)
        metrics.record_webhook_delivery(
            success=delivered, latency_seconds=time.perf_counter() - webhook_start
        )
    except Exception as e:
        logger.error("webhook_send_failed", event_type=event_type, error=str(e))
        metrics.record_webhook_delivery(
            success=False, latency_seconds=time.perf_counter() - webhook_start
        )


# =============================================================================
# BORROWERS
# =============================================================================

@router.post("/borrowers", response_model=ProfileResponse, status_code=201)
async def register_borrower(
    body: RegisterRequest,
    caller: str = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Register the caller, resetting any existing profile."""
    profile = BorrowerRegistry(db).register(caller, body.initial_collateral)
    return ProfileResponse.model_validate(profile)


@router.post("/borrowers/collateral", response_model=ProfileResponse)
async def add_collateral(
    body: CollateralRequest,
    caller: str = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Top up the caller's posted collateral."""
    profile = BorrowerRegistry(db).add_collateral(caller, body.amount)
    return ProfileResponse.model_validate(profile)


@router.get("/borrowers/{account}", response_model=ProfileResponse)
async def get_borrower(account: str, db: Session = Depends(get_db)):
    """Fetch a borrower profile."""
    profile = BorrowerRegistry(db).require_profile(account)
    return ProfileResponse.model_validate(profile)


@router.get("/borrowers/{account}/score", response_model=ScorePreviewResponse)
async def preview_score(account: str, db: Session = Depends(get_db)):
    """Show the current score and tentative terms without issuing anything."""
    return AssessmentService(db).preview_score(account)


# =============================================================================
# ASSESSMENTS AND LOANS
# =============================================================================

@router.post("/assessments", response_model=AssessmentResponse)
async def assess_and_issue(
    body: AssessmentRequest,
    caller: str = Depends(get_caller),
    db: Session = Depends(get_db),
    height_source: HeightSource = Depends(get_height_source),
):
    """
    Assess the caller and issue a loan when the request fits.

    This endpoint:
    1. Reads the current ledger height
    2. Scores the caller's profile
    3. Derives rate, duration and limit from the adjusted score
    4. Issues and links a loan on full approval
    5. Notifies settlement of the new loan

    Rejections and partial approvals are returned with status 200.
    """
    start_time = time.perf_counter()
    logger.info("assessment_requested", requested_amount=body.requested_amount)

    current_height = await height_source.current_height()
    result = AssessmentService(db).assess_and_issue(caller, body.requested_amount, current_height)

    duration_seconds = time.perf_counter() - start_time
    log_assessment(
        logger=logger,
        account_id=caller,
        status=result.status.value,
        requested_amount=body.requested_amount,
        approved_amount=result.approved_amount,
        risk_score=result.risk_score,
        loan_id=result.loan_id,
        duration_ms=duration_seconds * 1000,
    )
    metrics.record_assessment(
        status=result.status.value,
        risk_score=result.risk_score,
        approved_amount=result.approved_amount,
        latency_seconds=duration_seconds,
    )

    if result.status == AssessmentStatus.APPROVED:
        await _notify_settlement(db, LOAN_ISSUED, {
            "loan_id": result.loan_id,
            "borrower": caller,
            "amount": result.approved_amount,
            "interest_rate": result.interest_rate,
            "start_height": current_height,
            "duration": result.duration,
        })

    return result


@router.post("/loans/repay", response_model=RepaymentResponse)
async def repay_loan(
    caller: str = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Mark the caller's active loan as repaid."""
    result = LoanLifecycleService(db).repay(caller)
    metrics.record_loan_event("repaid")

    await _notify_settlement(db, LOAN_REPAID, {
        "loan_id": result.loan_id,
        "borrower": caller,
    })
    return result


@router.post("/loans/liquidate", response_model=LiquidationResponse)
async def liquidate_loan(
    body: LiquidationRequest,
    caller: str = Depends(get_caller),
    db: Session = Depends(get_db),
    height_source: HeightSource = Depends(get_height_source),
):
    """Liquidate a borrower's overdue loan. Operator only."""
    current_height = await height_source.current_height()
    result = LoanLifecycleService(db).liquidate(caller, body.borrower, current_height)
    metrics.record_loan_event("liquidated")

    await _notify_settlement(db, LOAN_LIQUIDATED, {
        "loan_id": result.loan_id,
        "borrower": result.borrower,
        "liquidated_at_height": current_height,
    })
    return result


@router.get("/loans/{loan_id}", response_model=LoanResponse)
async def get_loan(loan_id: int, db: Session = Depends(get_db)):
    """Fetch a loan by id."""
    loan = LoanLedger(db).require(loan_id)
    return LoanResponse.model_validate(loan)


# =============================================================================
# GOVERNANCE
# =============================================================================

@router.get("/governance", response_model=GovernanceResponse)
async def get_governance(db: Session = Depends(get_db)):
    """Current model parameters and pause flag."""
    return GovernanceResponse.model_validate(GovernanceService(db).get_config())


@router.put("/governance/paused", response_model=GovernanceResponse)
async def set_paused(
    body: PauseRequest,
    caller: str = Depends(get_caller),
    db: Session = Depends(get_db),
):
    config = GovernanceService(db).set_paused(caller, body.paused)
    return GovernanceResponse.model_validate(config)


@router.put("/governance/weights", response_model=GovernanceResponse)
async def set_model_weights(
    body: ModelWeightsRequest,
    caller: str = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Overwrite the scoring weights and threshold. Weights need not sum to 100."""
    config = GovernanceService(db).set_model_weights(
        caller,
        body.weight_collateral,
        body.weight_history,
        body.weight_repayment,
        body.risk_threshold,
    )
    return GovernanceResponse.model_validate(config)


@router.put("/governance/market-risk", response_model=GovernanceResponse)
async def update_market_risk(
    body: MarketRiskRequest,
    caller: str = Depends(get_caller),
    db: Session = Depends(get_db),
):
    config = GovernanceService(db).update_market_risk(caller, body.market_risk_factor)
    return GovernanceResponse.model_validate(config)

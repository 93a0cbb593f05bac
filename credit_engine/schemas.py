"""Pydantic schemas for request/response validation."""
import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from credit_engine.arithmetic import MAX_UINT


class AssessmentStatus(str, enum.Enum):
    """Outcome tag of an assessment."""
    APPROVED = "APPROVED"
    PARTIAL_APPROVAL = "PARTIAL_APPROVAL"
    REJECTED = "REJECTED"


class RegisterRequest(BaseModel):
    """Request body for POST /v1/borrowers."""
    initial_collateral: int = Field(0, ge=0, le=MAX_UINT, description="Collateral posted at registration")


class CollateralRequest(BaseModel):
    """Request body for POST /v1/borrowers/collateral."""
    amount: int = Field(..., ge=0, le=MAX_UINT, description="Collateral to add")


class AssessmentRequest(BaseModel):
    """Request body for POST /v1/assessments."""
    requested_amount: int = Field(..., ge=0, le=MAX_UINT, description="Principal requested")


class LiquidationRequest(BaseModel):
    """Request body for POST /v1/loans/liquidate."""
    borrower: str = Field(..., min_length=1, description="Account whose loan is liquidated")


class PauseRequest(BaseModel):
    """Request body for PUT /v1/governance/paused."""
    paused: bool


class ModelWeightsRequest(BaseModel):
    """Request body for PUT /v1/governance/weights. Weights need not sum to 100."""
    weight_collateral: int = Field(..., ge=0, le=MAX_UINT)
    weight_history: int = Field(..., ge=0, le=MAX_UINT)
    weight_repayment: int = Field(..., ge=0, le=MAX_UINT)
    risk_threshold: int = Field(..., ge=0, le=MAX_UINT)


class MarketRiskRequest(BaseModel):
    """Request body for PUT /v1/governance/market-risk."""
    market_risk_factor: int = Field(..., ge=0, le=MAX_UINT, description="10 is the neutral baseline")


class ProfileResponse(BaseModel):
    """A borrower profile."""
    model_config = ConfigDict(from_attributes=True)

    account: str
    collateral: int
    history_score: int
    repayment_count: int
    default_count: int
    active_loan_id: Optional[int] = None


class LoanResponse(BaseModel):
    """A loan record."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    borrower: str
    amount: int
    interest_rate: int
    start_height: int
    due_height: int
    status: str
    created_at: Optional[datetime] = None


class GovernanceResponse(BaseModel):
    """Current governance configuration."""
    model_config = ConfigDict(from_attributes=True)

    operator: str
    weight_collateral: int
    weight_history: int
    weight_repayment: int
    risk_threshold: int
    market_risk_factor: int
    paused: bool
    next_loan_id: int


class AssessmentResponse(BaseModel):
    """Tagged result of assess-and-issue. Only APPROVED carries a loan."""
    status: AssessmentStatus
    risk_score: int
    approved_amount: int
    loan_id: Optional[int] = None
    interest_rate: Optional[int] = None
    duration: int = 0


class ScoreComponents(BaseModel):
    """Intermediate values of the scoring formula."""
    collateral_score: int
    history_score: int
    repayment_score: int
    default_penalty: int
    weighted_sum: int
    normalized: int


class ScorePreviewResponse(BaseModel):
    """Read-only view of what an assessment would currently compute."""
    account: str
    raw_score: int
    qualifies: bool
    risk_threshold: int
    components: ScoreComponents
    adjusted_score: Optional[int] = None
    interest_rate: Optional[int] = None
    duration: Optional[int] = None
    max_loan: Optional[int] = None


class RepaymentResponse(BaseModel):
    """Result of a repayment."""
    loan_id: int
    status: str
    repayment_count: int


class LiquidationResponse(BaseModel):
    """Result of a liquidation."""
    loan_id: int
    borrower: str
    status: str
    history_score: int
    default_count: int

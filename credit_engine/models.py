"""SQLAlchemy ORM models for the credit engine."""
import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Column, String, BigInteger, Boolean, DateTime, Integer, Text, JSON
)

from credit_engine.database import Base


class LoanStatus(str, enum.Enum):
    """Loan states. Active is set at creation; every other state is terminal."""
    ACTIVE = "active"
    REPAID = "repaid"
    LIQUIDATED = "liquidated"
    DEFAULTED = "defaulted"


class GovernanceConfig(Base):
    """Process-wide model parameters, circuit breaker and loan-id counter."""
    __tablename__ = "governance_config"

    SINGLETON_ID = 1

    id = Column(Integer, primary_key=True, default=SINGLETON_ID)
    operator = Column(Text, nullable=False)
    weight_collateral = Column(BigInteger, nullable=False)
    weight_history = Column(BigInteger, nullable=False)
    weight_repayment = Column(BigInteger, nullable=False)
    risk_threshold = Column(BigInteger, nullable=False)
    market_risk_factor = Column(BigInteger, nullable=False)
    paused = Column(Boolean, nullable=False, default=False)
    next_loan_id = Column(BigInteger, nullable=False, default=1)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)


class BorrowerProfile(Base):
    """Per-account collateral, reputation and active loan link."""
    __tablename__ = "borrower_profile"

    account = Column(Text, primary_key=True)
    collateral = Column(BigInteger, nullable=False, default=0)
    history_score = Column(Integer, nullable=False, default=50)  # 0-100
    repayment_count = Column(BigInteger, nullable=False, default=0)
    default_count = Column(BigInteger, nullable=False, default=0)
    # Set iff the referenced loan is ACTIVE
    active_loan_id = Column(BigInteger, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)


class Loan(Base):
    """A single loan and its lifecycle status."""
    __tablename__ = "loan"

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    borrower = Column(Text, nullable=False, index=True)
    amount = Column(BigInteger, nullable=False)
    interest_rate = Column(Integer, nullable=False)  # percent
    start_height = Column(BigInteger, nullable=False)
    due_height = Column(BigInteger, nullable=False)
    status = Column(String(16), nullable=False, default=LoanStatus.ACTIVE.value)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class OutboundWebhook(Base):
    """Tracks outbound settlement notification attempts."""
    __tablename__ = "outbound_webhook"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_type = Column(Text, nullable=False)
    payload = Column(JSON, nullable=False)
    target_url = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    last_attempt_at = Column(DateTime(timezone=True))
    attempts = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

"""Shared fixtures: an in-memory database and services bound to it."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from credit_engine import models  # noqa: F401  registers tables on Base
from credit_engine.config import Settings
from credit_engine.database import Base
from credit_engine.models import BorrowerProfile, Loan, LoanStatus
from credit_engine.services import (
    AssessmentService, BorrowerRegistry, GovernanceService,
    LoanLedger, LoanLifecycleService,
)

OPERATOR = "operator"


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def test_settings():
    return Settings(_env_file=None, operator_account=OPERATOR)


@pytest.fixture
def governance(db, test_settings):
    return GovernanceService(db, test_settings)


@pytest.fixture
def registry(db, governance):
    return BorrowerRegistry(db, governance)


@pytest.fixture
def ledger(db, governance):
    return LoanLedger(db, governance)


@pytest.fixture
def assessment(db, governance, registry, ledger):
    return AssessmentService(db, governance, registry, ledger)


@pytest.fixture
def lifecycle(db, governance, registry, ledger):
    return LoanLifecycleService(db, governance, registry, ledger)


@pytest.fixture
def make_borrower(db, registry):
    """Register an account and overwrite its reputation fields directly."""

    def _make(
        account: str,
        collateral: int = 10000,
        history: int = 50,
        repayments: int = 0,
        defaults: int = 0,
    ) -> BorrowerProfile:
        profile = registry.register(account, collateral)
        profile.history_score = history
        profile.repayment_count = repayments
        profile.default_count = defaults
        db.commit()
        return profile

    return _make


def assert_loan_links_consistent(db) -> None:
    """
    A profile links a loan iff that loan is ACTIVE.

    Does not hold after register() overwrites a profile whose loan is still
    active: that loan stays ACTIVE with no profile pointing at it.
    """
    for profile in db.query(BorrowerProfile).all():
        if profile.active_loan_id is not None:
            loan = db.get(Loan, profile.active_loan_id)
            assert loan is not None
            assert loan.status == LoanStatus.ACTIVE.value
            assert loan.borrower == profile.account

    for loan in db.query(Loan).filter(Loan.status == LoanStatus.ACTIVE.value).all():
        profile = db.get(BorrowerProfile, loan.borrower)
        assert profile.active_loan_id == loan.id

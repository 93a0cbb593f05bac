"""Borrower registry: per-account credit profiles."""
from typing import Optional

from sqlalchemy.orm import Session

from credit_engine.arithmetic import checked_add, saturating_sub
from credit_engine.database import atomic
from credit_engine.errors import UnknownBorrower
from credit_engine.logging import get_logger
from credit_engine.models import BorrowerProfile
from credit_engine.services.governance import GovernanceService

logger = get_logger(__name__)

INITIAL_HISTORY_SCORE = 50
LIQUIDATION_HISTORY_PENALTY = 20


class BorrowerRegistry:
    """
    CRUD over borrower profiles.

    register and add_collateral are public operations and run in their own
    unit of work. The remaining mutators are building blocks for the
    assessment and lifecycle services and never commit on their own.
    """

    def __init__(self, db: Session, governance: Optional[GovernanceService] = None):
        self.db = db
        self.governance = governance or GovernanceService(db)

    def get_profile(self, account: str) -> Optional[BorrowerProfile]:
        return self.db.get(BorrowerProfile, account)

    def require_profile(self, account: str) -> BorrowerProfile:
        profile = self.get_profile(account)
        if profile is None:
            raise UnknownBorrower(f"no profile for {account}")
        return profile

    def register(self, caller: str, initial_collateral: int) -> BorrowerProfile:
        """
        Create a fresh profile for the caller.

        An existing profile is overwritten, which resets its history and
        counters. Re-registration is allowed.
        """
        with atomic(self.db):
            self.governance.require_operational(caller)
            profile = self.get_profile(caller)
            reregistered = profile is not None
            if profile is None:
                profile = BorrowerProfile(account=caller)
                self.db.add(profile)
            profile.collateral = initial_collateral
            profile.history_score = INITIAL_HISTORY_SCORE
            profile.repayment_count = 0
            profile.default_count = 0
            profile.active_loan_id = None

        logger.info(
            "borrower_registered",
            account_id=caller,
            collateral=initial_collateral,
            reregistered=reregistered,
        )
        return profile

    def add_collateral(self, caller: str, amount: int) -> BorrowerProfile:
        with atomic(self.db):
            self.governance.require_operational(caller)
            profile = self.require_profile(caller)
            profile.collateral = checked_add(profile.collateral, amount, "collateral")

        logger.info(
            "collateral_added",
            account_id=caller,
            amount=amount,
            collateral=profile.collateral,
        )
        return profile

    def link_loan(self, account: str, loan_id: int) -> BorrowerProfile:
        profile = self.require_profile(account)
        profile.active_loan_id = loan_id
        return profile

    def clear_loan(self, account: str) -> BorrowerProfile:
        profile = self.require_profile(account)
        profile.active_loan_id = None
        return profile

    def record_repayment(self, account: str) -> BorrowerProfile:
        profile = self.require_profile(account)
        profile.repayment_count = checked_add(profile.repayment_count, 1, "repayment_count")
        return profile

    def record_default(self, account: str) -> BorrowerProfile:
        """Count a liquidation and take 20 points off the history score."""
        profile = self.require_profile(account)
        profile.default_count = checked_add(profile.default_count, 1, "default_count")
        profile.history_score = saturating_sub(profile.history_score, LIQUIDATION_HISTORY_PENALTY)
        return profile

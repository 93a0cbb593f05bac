"""Governance service: model parameters, circuit breaker and loan ids."""
from typing import Optional

from sqlalchemy.orm import Session

from credit_engine.arithmetic import checked_add
from credit_engine.config import Settings, settings as default_settings
from credit_engine.database import atomic
from credit_engine.errors import Paused, Unauthorized
from credit_engine.logging import get_logger
from credit_engine.models import GovernanceConfig
from credit_engine.scoring import ModelWeights

logger = get_logger(__name__)


class GovernanceService:
    """
    Operator-gated access to the process-wide configuration record.

    The record is created with the configured defaults the first time it
    is read. Setters are plain overwrites: values are intentionally not
    range-checked so operators can tune the model freely.
    """

    def __init__(self, db: Session, config: Optional[Settings] = None):
        self.db = db
        self.settings = config or default_settings

    def get_config(self) -> GovernanceConfig:
        """Return the governance record, creating it with defaults if absent."""
        config = self.db.get(GovernanceConfig, GovernanceConfig.SINGLETON_ID)
        if config is None:
            config = GovernanceConfig(
                id=GovernanceConfig.SINGLETON_ID,
                operator=self.settings.operator_account,
                weight_collateral=self.settings.default_weight_collateral,
                weight_history=self.settings.default_weight_history,
                weight_repayment=self.settings.default_weight_repayment,
                risk_threshold=self.settings.default_risk_threshold,
                market_risk_factor=self.settings.default_market_risk_factor,
                paused=False,
                next_loan_id=1,
            )
            self.db.add(config)
            self.db.flush()
            logger.info("governance_initialized", operator=config.operator)
        return config

    def weights(self) -> ModelWeights:
        """Current scoring weights."""
        config = self.get_config()
        return ModelWeights(
            collateral=config.weight_collateral,
            history=config.weight_history,
            repayment=config.weight_repayment,
        )

    def is_operator(self, caller: str) -> bool:
        return caller == self.get_config().operator

    def is_operational(self, caller: str) -> bool:
        """True unless paused; the operator is never locked out."""
        config = self.get_config()
        return not config.paused or caller == config.operator

    def require_operational(self, caller: str) -> None:
        if not self.is_operational(caller):
            raise Paused("system is paused")

    def require_operator(self, caller: str) -> None:
        if not self.is_operator(caller):
            raise Unauthorized(f"{caller} is not the operator")

    def allocate_loan_id(self) -> int:
        """Hand out the next loan id. Caller must be inside a unit of work."""
        config = self.get_config()
        loan_id = config.next_loan_id
        config.next_loan_id = checked_add(loan_id, 1, "next_loan_id")
        return loan_id

    def set_paused(self, caller: str, paused: bool) -> GovernanceConfig:
        with atomic(self.db):
            self.require_operator(caller)
            config = self.get_config()
            config.paused = paused
        logger.info("governance_paused_updated", paused=paused)
        return config

    def set_model_weights(
        self,
        caller: str,
        weight_collateral: int,
        weight_history: int,
        weight_repayment: int,
        risk_threshold: int,
    ) -> GovernanceConfig:
        """Overwrite the scoring weights and qualifying threshold."""
        with atomic(self.db):
            self.require_operator(caller)
            config = self.get_config()
            config.weight_collateral = weight_collateral
            config.weight_history = weight_history
            config.weight_repayment = weight_repayment
            config.risk_threshold = risk_threshold
        logger.info(
            "governance_weights_updated",
            weight_collateral=weight_collateral,
            weight_history=weight_history,
            weight_repayment=weight_repayment,
            risk_threshold=risk_threshold,
        )
        return config

    def update_market_risk(self, caller: str, factor: int) -> GovernanceConfig:
        with atomic(self.db):
            self.require_operator(caller)
            config = self.get_config()
            config.market_risk_factor = factor
        logger.info("governance_market_risk_updated", market_risk_factor=factor)
        return config

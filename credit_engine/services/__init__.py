"""Service layer for the credit engine."""
from credit_engine.services.assessment import AssessmentService
from credit_engine.services.governance import GovernanceService
from credit_engine.services.height import HeightSource, build_height_source
from credit_engine.services.ledger import LoanLedger
from credit_engine.services.lifecycle import LoanLifecycleService
from credit_engine.services.registry import BorrowerRegistry
from credit_engine.services.webhook import WebhookService

__all__ = [
    "AssessmentService",
    "GovernanceService",
    "HeightSource",
    "build_height_source",
    "LoanLedger",
    "LoanLifecycleService",
    "BorrowerRegistry",
    "WebhookService",
]

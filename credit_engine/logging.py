"""
Structured logging configuration for the Credit Engine service.

All logs are JSON-formatted with these standard fields:
- timestamp: ISO 8601 timestamp
- event: The log event name (first positional argument)
- request_id: UUID for tracing requests end-to-end
- account_id: Calling account identifier (when available)
- duration_ms: Operation duration in milliseconds
- outcome: Result of the operation (for assessment events)
"""
import uuid
from contextvars import ContextVar
from typing import Any, Optional

import structlog

# Context variables for request-scoped data
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")
account_id_ctx: ContextVar[str] = ContextVar("account_id", default="")


def add_context_vars(
    logger: structlog.typing.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Processor that adds context variables to log entries."""
    request_id = request_id_ctx.get()
    account_id = account_id_ctx.get()

    if request_id:
        event_dict["request_id"] = request_id
    if account_id:
        event_dict.setdefault("account_id", account_id)

    return event_dict


def configure_logging() -> None:
    """Configure structlog with JSON output and context processors."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            add_context_vars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance."""
    return structlog.get_logger(name)


def set_request_context(request_id: str, account_id: Optional[str] = None) -> None:
    """Set the request context for logging."""
    request_id_ctx.set(request_id)
    if account_id:
        account_id_ctx.set(account_id)


def clear_request_context() -> None:
    """Clear the request context after request completion."""
    request_id_ctx.set("")
    account_id_ctx.set("")


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return str(uuid.uuid4())


def log_assessment(
    logger: structlog.stdlib.BoundLogger,
    account_id: str,
    status: str,
    requested_amount: int,
    approved_amount: int,
    risk_score: int,
    loan_id: Optional[int],
    duration_ms: float,
) -> None:
    """Log an assessment outcome with standard fields."""
    logger.info(
        "assessment_completed",
        account_id=account_id,
        outcome=status.lower(),
        status=status,
        requested_amount=requested_amount,
        approved_amount=approved_amount,
        risk_score=risk_score,
        loan_id=loan_id,
        duration_ms=round(duration_ms, 2),
    )

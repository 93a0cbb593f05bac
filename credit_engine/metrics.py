"""
Prometheus Metrics for the Credit Engine service.

This module defines all metrics exposed at the /metrics endpoint.
Metrics are categorized into:

1. Business Impact Metrics - For Risk/Finance teams
   - Assessment outcomes, scores, amounts approved, loan lifecycle events

2. Technical Metrics - For Engineering/SRE teams
   - Latencies, error rates, webhook queue depth
"""
from prometheus_client import Counter, Gauge, Histogram, Info

# =============================================================================
# SERVICE INFO
# =============================================================================

SERVICE_INFO = Info(
    "credit_engine_service",
    "Service information"
)
SERVICE_INFO.info({
    "version": "0.1.0",
    "service": "credit-engine",
})

# =============================================================================
# BUSINESS IMPACT METRICS
# =============================================================================

# Counter: Assessments by outcome
ASSESSMENT_TOTAL = Counter(
    "credit_engine_assessment_total",
    "Total assessments made",
    ["status"]  # APPROVED, PARTIAL_APPROVAL, REJECTED
)

# Histogram: Reported risk score (adjusted when qualifying, raw when rejected)
ASSESSMENT_RISK_SCORE = Histogram(
    "credit_engine_assessment_risk_score",
    "Distribution of risk scores returned by assessments",
    ["status"],
    buckets=[10, 20, 30, 40, 50, 60, 70, 80, 90, 100]
)

# Counter: Principal issued through full approvals
AMOUNT_ISSUED = Counter(
    "credit_engine_amount_issued_total",
    "Total principal issued across approved loans"
)

# Counter: Loan lifecycle transitions
LOAN_EVENTS = Counter(
    "credit_engine_loan_events_total",
    "Loan lifecycle events",
    ["event"]  # issued, repaid, liquidated
)

# Counter: Rejected operations by error code
OPERATION_ERRORS = Counter(
    "credit_engine_operation_errors_total",
    "Operations rejected by a precondition",
    ["code"]
)

# =============================================================================
# TECHNICAL METRICS
# =============================================================================

# Histogram: Assessment latency (end-to-end)
ASSESSMENT_LATENCY = Histogram(
    "credit_engine_assessment_latency_seconds",
    "Time to assess a borrower (end-to-end)",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Histogram: Risk scoring latency
SCORING_LATENCY = Histogram(
    "credit_engine_scoring_latency_seconds",
    "Time to calculate risk score",
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.025]
)

# Histogram: Webhook delivery latency
WEBHOOK_LATENCY = Histogram(
    "credit_engine_webhook_latency_seconds",
    "Time to deliver webhook",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Counter: Webhook delivery outcomes
WEBHOOK_DELIVERY = Counter(
    "credit_engine_webhook_delivery_total",
    "Webhook delivery attempts",
    ["status"]  # success, failed
)

# Counter: Webhook retries
WEBHOOK_RETRY = Counter(
    "credit_engine_webhook_retry_total",
    "Total webhook retry attempts"
)

# Gauge: Webhook queue depth (pending webhooks)
WEBHOOK_QUEUE_DEPTH = Gauge(
    "credit_engine_webhook_queue_depth",
    "Number of webhooks pending delivery"
)

# =============================================================================
# HTTP METRICS (Standard)
# =============================================================================

HTTP_REQUESTS = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

HTTP_REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)

# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def record_assessment(
    status: str,
    risk_score: int,
    approved_amount: int,
    latency_seconds: float,
) -> None:
    """
    Record all metrics for a single assessment.

    Args:
        status: Assessment status tag
        risk_score: Score reported in the result
        approved_amount: Principal issued (only counted for APPROVED)
        latency_seconds: Time taken to assess
    """
    ASSESSMENT_TOTAL.labels(status=status).inc()
    ASSESSMENT_RISK_SCORE.labels(status=status).observe(risk_score)
    ASSESSMENT_LATENCY.observe(latency_seconds)

    if status == "APPROVED":
        AMOUNT_ISSUED.inc(approved_amount)
        LOAN_EVENTS.labels(event="issued").inc()


def record_loan_event(event: str) -> None:
    """Record a repayment or liquidation."""
    LOAN_EVENTS.labels(event=event).inc()


def record_operation_error(code: str) -> None:
    OPERATION_ERRORS.labels(code=code).inc()


def record_webhook_delivery(success: bool, latency_seconds: float) -> None:
    """Record webhook delivery metrics."""
    WEBHOOK_LATENCY.observe(latency_seconds)

    status = "success" if success else "failed"
    WEBHOOK_DELIVERY.labels(status=status).inc()


def record_webhook_retry() -> None:
    WEBHOOK_RETRY.inc()


def set_webhook_queue_depth(depth: int) -> None:
    """Update the webhook queue depth gauge."""
    WEBHOOK_QUEUE_DEPTH.set(depth)


def record_scoring_latency(latency_seconds: float) -> None:
    """Record risk scoring latency."""
    SCORING_LATENCY.observe(latency_seconds)


def record_http_request(method: str, endpoint: str, status: int, latency_seconds: float) -> None:
    HTTP_REQUESTS.labels(method=method, endpoint=endpoint, status=status).inc()
    HTTP_REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(latency_seconds)

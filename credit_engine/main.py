"""
Credit Engine Service

A FastAPI-based service for collateral-backed credit scoring and loan
lifecycle management.

Borrowers register with collateral and build reputation through
repayments. Each assessment turns that profile into a bounded risk score
using operator-tuned weights, derives the loan terms from the score, and
issues a loan when the request fits within the collateral-backed limit.

The service owns the scoring model and the loan state machine only:
- Caller identity arrives in the X-Account-ID header
- Ledger height comes from an external height source
- Settlement of funds is delegated to a webhook consumer
"""
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from credit_engine import metrics
from credit_engine.api import router
from credit_engine.config import settings
from credit_engine.database import SessionLocal, atomic, engine, Base
from credit_engine.errors import CreditEngineError
from credit_engine.logging import (
    configure_logging,
    get_logger,
    set_request_context,
    clear_request_context,
    generate_request_id,
)
from credit_engine.services.governance import GovernanceService
from credit_engine.services.height import HeightSourceError

# Configure structured logging
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(
        "service_starting",
        service_name=settings.service_name,
        height_source=settings.height_source,
    )

    # Create tables if they don't exist (in production, use migrations)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        with atomic(db):
            GovernanceService(db).get_config()
    finally:
        db.close()

    logger.info("service_started", service_name=settings.service_name)

    yield

    logger.info("service_stopping", service_name=settings.service_name)


app = FastAPI(
    title="Credit Engine",
    description="Collateral-backed credit scoring and loan lifecycle service",
    version="0.1.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """
    Middleware for request tracing, logging, and metrics.

    Sets up request context with:
    - request_id: Unique identifier for tracing
    - Timing for duration_ms calculation
    - Prometheus metrics collection
    """
    method = request.method
    path = request.url.path

    # Skip logging/metrics for health and metrics endpoints
    if path in ("/health", "/metrics"):
        return await call_next(request)

    request_id = request.headers.get("X-Request-ID") or generate_request_id()
    set_request_context(request_id)
    request.state.request_id = request_id

    start_time = time.perf_counter()
    logger.info("request_received", method=method, path=path)

    try:
        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "request_completed",
            method=method,
            path=path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )
        metrics.record_http_request(method, path, response.status_code, duration_ms / 1000)

        response.headers["X-Request-ID"] = request_id
        return response

    except Exception as e:
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.error(
            "request_failed",
            method=method,
            path=path,
            duration_ms=round(duration_ms, 2),
            error=str(e),
        )
        metrics.record_http_request(method, path, 500, duration_ms / 1000)
        raise

    finally:
        clear_request_context()


@app.exception_handler(CreditEngineError)
async def credit_engine_error_handler(request: Request, exc: CreditEngineError):
    """Map core errors to their HTTP status with a stable error code."""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.warning(
        "operation_rejected",
        error_code=exc.code,
        detail=exc.detail,
        path=request.url.path,
    )
    metrics.record_operation_error(exc.code)

    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "detail": exc.detail},
        headers={"X-Request-ID": request_id},
    )


@app.exception_handler(HeightSourceError)
async def height_source_error_handler(request: Request, exc: HeightSourceError):
    """Handle height service errors."""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.error(
        "height_source_error",
        status_code=exc.status_code,
        detail=exc.detail,
    )
    return JSONResponse(
        status_code=502,
        content={"detail": f"Height source error: {exc.detail}"},
        headers={"X-Request-ID": request_id},
    )


app.include_router(router)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "ok", "service": settings.service_name}


@app.get("/metrics")
async def metrics_endpoint():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

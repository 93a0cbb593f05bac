"""Webhook service for notifying the settlement service of loan events."""
from datetime import datetime
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from credit_engine import metrics
from credit_engine.config import settings
from credit_engine.logging import get_logger
from credit_engine.models import OutboundWebhook

logger = get_logger(__name__)

LOAN_ISSUED = "loan.issued"
LOAN_REPAID = "loan.repaid"
LOAN_LIQUIDATED = "loan.liquidated"


class WebhookService:
    """
    Sends loan lifecycle events to the settlement service.

    The engine never moves funds itself; settlement reacts to these events.
    Manages webhook delivery with:
    - Persistence of webhook attempts
    - Retry tracking
    - Async delivery
    """

    MAX_ATTEMPTS = 3

    def __init__(self, db: Session, target_url: Optional[str] = None):
        """
        Initialize the webhook service.

        Args:
            db: SQLAlchemy database session
            target_url: Webhook target URL (defaults to settings.settlement_webhook_url)
        """
        self.db = db
        self.target_url = target_url or settings.settlement_webhook_url

    async def send_loan_event(self, event_type: str, payload: dict) -> bool:
        """
        Record and deliver a loan event.

        Args:
            event_type: One of loan.issued, loan.repaid, loan.liquidated
            payload: Event body

        Returns:
            True if the webhook was delivered successfully
        """
        webhook = OutboundWebhook(
            event_type=event_type,
            payload={"event": event_type, **payload},
            target_url=self.target_url,
            status="pending",
            attempts=0,
        )
        self.db.add(webhook)
        self.db.commit()

        self._update_queue_depth()

        return await self._deliver_webhook(webhook)

    def _update_queue_depth(self) -> None:
        pending_count = (
            self.db.query(OutboundWebhook)
            .filter(OutboundWebhook.status == "pending")
            .count()
        )
        metrics.set_webhook_queue_depth(pending_count)

    async def _deliver_webhook(self, webhook: OutboundWebhook) -> bool:
        logger.info("delivering_webhook",
                    webhook_id=webhook.id,
                    event_type=webhook.event_type,
                    target_url=webhook.target_url)

        async with httpx.AsyncClient(timeout=10.0) as client:
            try:
                response = await client.post(
                    webhook.target_url,
                    json=webhook.payload,
                    headers={"Content-Type": "application/json"},
                )

                webhook.attempts += 1
                webhook.last_attempt_at = datetime.utcnow()

                if response.status_code < 400:
                    webhook.status = "delivered"
                    self.db.commit()
                    logger.info("webhook_delivered",
                                webhook_id=webhook.id,
                                status_code=response.status_code)
                    self._update_queue_depth()
                    return True

                webhook.status = "failed" if webhook.attempts >= self.MAX_ATTEMPTS else "pending"
                self.db.commit()
                logger.warning("webhook_delivery_failed",
                               webhook_id=webhook.id,
                               status_code=response.status_code,
                               attempts=webhook.attempts)
                self._update_queue_depth()
                return False

            except httpx.RequestError as e:
                webhook.attempts += 1
                webhook.last_attempt_at = datetime.utcnow()
                webhook.status = "failed" if webhook.attempts >= self.MAX_ATTEMPTS else "pending"
                self.db.commit()

                logger.error("webhook_request_error",
                             webhook_id=webhook.id,
                             error=str(e),
                             attempts=webhook.attempts)
                self._update_queue_depth()
                return False

    async def retry_pending_webhooks(self) -> int:
        """
        Retry all pending webhooks that haven't exceeded max attempts.

        Returns:
            Number of webhooks successfully delivered
        """
        pending = (
            self.db.query(OutboundWebhook)
            .filter(OutboundWebhook.status == "pending")
            .filter(OutboundWebhook.attempts < self.MAX_ATTEMPTS)
            .all()
        )

        delivered = 0
        for webhook in pending:
            metrics.record_webhook_retry()
            if await self._deliver_webhook(webhook):
                delivered += 1

        logger.info("pending_webhooks_retried",
                    pending=len(pending),
                    delivered=delivered)
        return delivered

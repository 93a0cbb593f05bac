"""Tests for settlement webhook delivery and retry."""
import asyncio
from unittest.mock import AsyncMock, patch

import httpx

from credit_engine.models import OutboundWebhook
from credit_engine.services.webhook import LOAN_ISSUED, WebhookService

TARGET = "http://settlement.test/hook"


def _response(status_code: int) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("POST", TARGET))


class TestSendLoanEvent:
    """Test a single delivery attempt."""

    def test_delivered(self, db):
        service = WebhookService(db, target_url=TARGET)

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=_response(200)) as post:
            delivered = asyncio.run(service.send_loan_event(LOAN_ISSUED, {"loan_id": 1}))

        assert delivered is True
        assert post.await_args.kwargs["json"] == {"event": LOAN_ISSUED, "loan_id": 1}
        webhook = db.query(OutboundWebhook).one()
        assert webhook.status == "delivered"
        assert webhook.attempts == 1

    def test_server_error_stays_pending(self, db):
        service = WebhookService(db, target_url=TARGET)

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=_response(500)):
            delivered = asyncio.run(service.send_loan_event(LOAN_ISSUED, {"loan_id": 1}))

        assert delivered is False
        assert db.query(OutboundWebhook).one().status == "pending"

    def test_connection_error_stays_pending(self, db):
        service = WebhookService(db, target_url=TARGET)

        with patch(
            "httpx.AsyncClient.post",
            new_callable=AsyncMock,
            side_effect=httpx.ConnectError("refused"),
        ):
            delivered = asyncio.run(service.send_loan_event(LOAN_ISSUED, {"loan_id": 1}))

        assert delivered is False
        assert db.query(OutboundWebhook).one().attempts == 1


class TestRetryPending:
    """Pending webhooks are retried until MAX_ATTEMPTS."""

    def test_retry_delivers(self, db):
        service = WebhookService(db, target_url=TARGET)
        with patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=_response(503)):
            asyncio.run(service.send_loan_event(LOAN_ISSUED, {"loan_id": 1}))

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=_response(200)):
            delivered = asyncio.run(service.retry_pending_webhooks())

        assert delivered == 1
        webhook = db.query(OutboundWebhook).one()
        assert webhook.status == "delivered"
        assert webhook.attempts == 2

    def test_gives_up_after_max_attempts(self, db):
        service = WebhookService(db, target_url=TARGET)

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=_response(500)):
            asyncio.run(service.send_loan_event(LOAN_ISSUED, {"loan_id": 1}))
            asyncio.run(service.retry_pending_webhooks())
            asyncio.run(service.retry_pending_webhooks())
            assert asyncio.run(service.retry_pending_webhooks()) == 0

        webhook = db.query(OutboundWebhook).one()
        assert webhook.status == "failed"
        assert webhook.attempts == WebhookService.MAX_ATTEMPTS

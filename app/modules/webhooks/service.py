"""
Webhook test utility.

Sends a single ``ping`` event to a URL and reports whether it answered with a
2xx status and how long it took. There is no retry.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Callable

import httpx

from app.config.settings import settings
from app.modules.webhooks.schemas import WebhookTestResult

logger = logging.getLogger(__name__)

PING_MESSAGE = "Webhook test from OTO Reach"


class WebhookService:
    def __init__(self, client_factory: Callable[..., httpx.AsyncClient] = httpx.AsyncClient):
        self.client_factory = client_factory

    async def test_webhook_url(self, webhook_url: str) -> WebhookTestResult:
        payload = {
            "event": "ping",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "message": PING_MESSAGE,
        }
        started = time.monotonic()
        try:
            async with self.client_factory(timeout=settings.webhook_test_timeout_seconds) as client:
                response = await client.post(
                    webhook_url,
                    json=payload,
                    headers={"X-Webhook-Event": "ping"},
                )
        except httpx.InvalidURL:
            return WebhookTestResult(success=False, error="Invalid URL format")
        except httpx.TimeoutException:
            elapsed = int((time.monotonic() - started) * 1000)
            logger.warning(f"Webhook test to {webhook_url} timed out after {elapsed}ms")
            return WebhookTestResult(success=False, error="Request timed out", responseTime=elapsed)
        except httpx.HTTPError as e:
            logger.warning(f"Webhook test to {webhook_url} failed: {e}")
            return WebhookTestResult(success=False, error=str(e) or e.__class__.__name__)

        elapsed = int((time.monotonic() - started) * 1000)
        if response.is_success:
            return WebhookTestResult(success=True, responseTime=elapsed)

        body = response.text[:500] if response.text else "Unknown error"
        return WebhookTestResult(
            success=False,
            error=f"HTTP {response.status_code}: {body}",
            responseTime=elapsed
        )

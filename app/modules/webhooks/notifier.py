"""
Per-user webhook notifications.

When a user's project file is created or updated, the file (with its project
and sub-project) is POSTed to the URL stored in ``users.webhook_url``. Users
without a webhook are skipped. Transport errors and 5xx answers are retried
with exponential backoff; 4xx answers are not. Failures are logged and never
reach the caller, since notifications run after the response is sent.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

import httpx
from supabase import Client

from app.config.settings import settings

logger = logging.getLogger(__name__)

FILE_CREATED = "file.created"
FILE_UPDATED = "file.updated"

# Delay before retry n is RETRY_BACKOFF_SECONDS * 2 ** (n - 1)
RETRY_BACKOFF_SECONDS = 1.0


class UserWebhookNotifier:
    def __init__(self, supabase: Client, client_factory: Callable[..., httpx.AsyncClient] = httpx.AsyncClient):
        self.supabase = supabase
        self.client_factory = client_factory

    def _get_webhook_url(self, user_id: str) -> Optional[str]:
        result = self.supabase.table("users")\
            .select("webhook_url")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        if not result.data:
            return None
        return result.data[0].get("webhook_url") or None

    def _first(self, table: str, columns: str, row_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table(table)\
            .select(columns)\
            .eq("id", row_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def build_file_payload(self, event: str, user_id: str, file_id: str) -> Optional[Dict[str, Any]]:
        """Event body for a file, or None when the file is gone"""
        file = self._first("project_files", "*", file_id)
        if not file:
            return None
        sub_project = self._first("sub_projects", "id, name, project_id", file["sub_project_id"]) or {}
        project = self._first("projects", "id, name", sub_project["project_id"]) if sub_project else None
        project = project or {}

        return {
            "event": event,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "user_id": user_id,
            "file": {
                "id": file["id"],
                "name": file.get("name"),
                "description": file.get("description"),
                "content": file.get("content"),
                "file_type": file.get("file_type"),
                "size_bytes": file.get("size_bytes"),
                "project_id": project.get("id"),
                "sub_project_id": file["sub_project_id"],
                "category": file.get("category"),
                "sub_category": file.get("sub_category"),
            },
            "project": {"id": project.get("id"), "name": project.get("name")},
            "sub_project": {"id": sub_project.get("id"), "name": sub_project.get("name")},
        }

    async def send(self, webhook_url: str, payload: Dict[str, Any], user_id: str, file_id: str) -> bool:
        """POST with retries; True once the endpoint answers 2xx"""
        max_attempts = max(1, settings.user_webhook_max_attempts)
        async with self.client_factory(timeout=settings.user_webhook_timeout_seconds) as client:
            for attempt in range(1, max_attempts + 1):
                headers = {
                    "X-Webhook-Event": payload["event"],
                    "X-Webhook-Attempt": str(attempt),
                    "X-Webhook-User-Id": user_id,
                    "X-Webhook-File-Id": file_id,
                }
                try:
                    response = await client.post(webhook_url, json=payload, headers=headers)
                except (httpx.HTTPError, httpx.InvalidURL) as e:
                    logger.warning(f"Webhook {payload['event']} attempt {attempt} to {webhook_url} failed: {e}")
                else:
                    if response.is_success:
                        logger.info(f"Webhook {payload['event']} delivered for file {file_id}")
                        return True
                    if response.is_client_error:
                        logger.warning(
                            f"Webhook {payload['event']} rejected with {response.status_code}, not retrying"
                        )
                        return False
                    logger.warning(
                        f"Webhook {payload['event']} attempt {attempt} returned {response.status_code}"
                    )

                if attempt < max_attempts:
                    await asyncio.sleep(RETRY_BACKOFF_SECONDS * 2 ** (attempt - 1))

        logger.error(f"Webhook {payload['event']} for file {file_id} failed after {max_attempts} attempt(s)")
        return False

    async def notify_file_event(self, event: str, user_id: str, file_id: str) -> bool:
        try:
            webhook_url = self._get_webhook_url(user_id)
            if not webhook_url:
                logger.debug(f"User {user_id} has no webhook, skipping {event}")
                return False

            payload = self.build_file_payload(event, user_id, file_id)
            if payload is None:
                logger.warning(f"File {file_id} disappeared before {event} could be sent")
                return False

            return await self.send(webhook_url, payload, user_id, file_id)
        except Exception as e:
            logger.error(f"Error sending {event} webhook for file {file_id}: {e}")
            return False

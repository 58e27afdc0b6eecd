from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from app.modules.webhooks.schemas import WebhookTestRequest, WebhookTestResponse
from app.modules.webhooks.service import WebhookService
from app.core.dependencies import get_current_admin, get_http_client_factory
from app.core.validation import is_valid_url
from typing import Callable, Dict
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/webhook", tags=["webhooks"])


def get_webhook_service(client_factory: Callable = Depends(get_http_client_factory)) -> WebhookService:
    return WebhookService(client_factory)


@router.post("/test", response_model=WebhookTestResponse)
async def test_webhook(
    data: WebhookTestRequest,
    admin: Dict = Depends(get_current_admin),
    service: WebhookService = Depends(get_webhook_service)
):
    """Send a ping to a webhook URL and report latency (admin only)"""
    if not data.webhook_url:
        raise HTTPException(status_code=400, detail="webhook_url is required")
    if not is_valid_url(data.webhook_url):
        raise HTTPException(status_code=400, detail="Invalid URL format")

    result = await service.test_webhook_url(data.webhook_url.strip())
    if result.success:
        return WebhookTestResponse(responseTime=result.responseTime)

    logger.info(f"Webhook test failed for {data.webhook_url}: {result.error}")
    return JSONResponse(
        status_code=422,
        content={"success": False, "error": result.error or "Webhook test failed"}
    )

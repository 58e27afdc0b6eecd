from pydantic import BaseModel
from typing import Optional


class WebhookTestRequest(BaseModel):
    webhook_url: Optional[str] = None


class WebhookTestResult(BaseModel):
    success: bool
    responseTime: Optional[int] = None  # milliseconds
    error: Optional[str] = None


class WebhookTestResponse(BaseModel):
    success: bool = True
    message: str = "Webhook test successful"
    responseTime: Optional[int] = None

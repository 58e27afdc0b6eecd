from pydantic import BaseModel
from typing import Optional


class AdminAuthRequest(BaseModel):
    action: Optional[str] = None  # login | create | logout
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class AdminSummary(BaseModel):
    id: str
    email: str
    name: Optional[str] = None


class AdminAuthResponse(BaseModel):
    success: bool = True
    user: Optional[AdminSummary] = None


class AdminSessionResponse(BaseModel):
    authenticated: bool
    user: Optional[AdminSummary] = None
    expiresAt: Optional[str] = None

from pydantic import BaseModel
from typing import Optional


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserSummary(BaseModel):
    id: str
    email: str
    name: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    user: UserSummary
    message: str = "Login successful"


class SessionUser(UserSummary):
    avatar_url: Optional[str] = None


class SessionResponse(BaseModel):
    authenticated: bool
    user: Optional[SessionUser] = None
    expiresAt: Optional[str] = None


class SignOutResponse(BaseModel):
    success: bool = True
    message: str = "Logged out successfully"

from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class AdminUserCreate(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class AdminUserUpdate(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    webhook_url: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    email_verified: Optional[bool] = None
    webhook_url: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserListResponse(BaseModel):
    users: List[UserResponse]


class UserEnvelope(BaseModel):
    user: UserResponse


class UserMutationResponse(BaseModel):
    success: bool = True
    user: UserResponse


class SuccessResponse(BaseModel):
    success: bool = True

from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class AgentCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    system_prompt: Optional[str] = None
    webhook_url: Optional[str] = None
    category: Optional[str] = None
    is_active: Optional[bool] = None
    is_global: Optional[bool] = None
    assigned_to: Optional[List[str]] = None


class AgentUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    system_prompt: Optional[str] = None
    webhook_url: Optional[str] = None
    category: Optional[str] = None
    is_active: Optional[bool] = None
    is_global: Optional[bool] = None
    assigned_to: Optional[List[str]] = None


class AgentResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    system_prompt: str
    webhook_url: Optional[str] = None
    category: Optional[str] = None
    is_active: bool = True
    is_global: bool = True
    assigned_to: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserAgentResponse(BaseModel):
    """What a user sees of an agent: no webhook URL, no assignment list"""
    id: str
    name: str
    description: Optional[str] = None
    system_prompt: str
    category: Optional[str] = None
    is_global: bool = True


class AgentListResponse(BaseModel):
    agents: List[AgentResponse]


class UserAgentListResponse(BaseModel):
    agents: List[UserAgentResponse]


class AgentEnvelope(BaseModel):
    agent: AgentResponse


class AgentMutationResponse(BaseModel):
    success: bool = True
    agent: AgentResponse


class SuccessResponse(BaseModel):
    success: bool = True

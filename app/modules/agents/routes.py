from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.agents.schemas import (
    AgentCreate, AgentUpdate, AgentListResponse, AgentEnvelope, AgentMutationResponse,
    UserAgentListResponse, SuccessResponse
)
from app.modules.agents.service import AgentService
from app.core.dependencies import get_current_admin, get_current_user
from supabase import Client
from typing import Dict, Optional

router = APIRouter(tags=["agents"])


def get_agent_service(supabase: Client = Depends(get_supabase)) -> AgentService:
    return AgentService(supabase)


@router.get("/admin/agents", response_model=AgentListResponse)
async def list_agents(
    user_id: Optional[str] = None,
    admin: Dict = Depends(get_current_admin),
    service: AgentService = Depends(get_agent_service)
):
    """List agents, optionally only those available to one user (admin only)"""
    return AgentListResponse(agents=service.list_agents(user_id))


@router.post("/admin/agents", response_model=AgentMutationResponse)
async def create_agent(
    agent_data: AgentCreate,
    admin: Dict = Depends(get_current_admin),
    service: AgentService = Depends(get_agent_service)
):
    """Create an agent and assign it to users (admin only)"""
    return AgentMutationResponse(agent=service.create_agent(agent_data))


@router.get("/admin/agents/{agent_id}", response_model=AgentEnvelope)
async def get_agent(
    agent_id: str,
    admin: Dict = Depends(get_current_admin),
    service: AgentService = Depends(get_agent_service)
):
    return AgentEnvelope(agent=service.get_agent(agent_id))


@router.patch("/admin/agents/{agent_id}", response_model=AgentMutationResponse)
async def update_agent(
    agent_id: str,
    agent_data: AgentUpdate,
    admin: Dict = Depends(get_current_admin),
    service: AgentService = Depends(get_agent_service)
):
    """Update agent fields; assigned_to replaces the assignment list (admin only)"""
    return AgentMutationResponse(agent=service.update_agent(agent_id, agent_data))


@router.delete("/admin/agents/{agent_id}", response_model=SuccessResponse)
async def delete_agent(
    agent_id: str,
    admin: Dict = Depends(get_current_admin),
    service: AgentService = Depends(get_agent_service)
):
    service.delete_agent(agent_id)
    return SuccessResponse()


@router.get("/user/agents", response_model=UserAgentListResponse)
async def list_user_agents(
    user_data: Dict = Depends(get_current_user),
    service: AgentService = Depends(get_agent_service)
):
    """Agents the caller can chat with"""
    return UserAgentListResponse(agents=service.list_user_agents(user_data["id"]))

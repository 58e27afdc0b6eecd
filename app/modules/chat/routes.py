from fastapi import APIRouter, Depends, HTTPException
from app.database.supabase_client import get_supabase
from app.modules.agents.service import AgentService
from app.modules.chat.schemas import ChatRequest
from app.modules.chat.service import ChatProxyService
from app.core.dependencies import get_current_user, get_http_client_factory
from supabase import Client
from typing import Callable, Dict

router = APIRouter(prefix="/chat", tags=["chat"])


def get_chat_service(
    client_factory: Callable = Depends(get_http_client_factory),
    supabase: Client = Depends(get_supabase)
) -> ChatProxyService:
    return ChatProxyService(client_factory, agents=AgentService(supabase))


@router.post("")
async def chat(
    chat_request: ChatRequest,
    user_data: Dict = Depends(get_current_user),
    service: ChatProxyService = Depends(get_chat_service)
):
    """Forward the conversation to the agent webhook and stream its reply"""
    if chat_request.input is None and not chat_request.messages:
        raise HTTPException(status_code=400, detail="input or messages is required")
    return await service.forward(chat_request, user_data["id"])

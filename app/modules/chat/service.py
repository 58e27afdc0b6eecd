"""
Chat proxy to the agent webhook.

The conversation is POSTed to the selected agent's webhook, or to the
statically configured AGENT_WEBHOOK_URL when no agent is chosen or the agent
has none, and the upstream body is streamed back untouched with its status
code and content type. Missing configuration, a non-2xx upstream, or a
network error become a 500.
"""

import logging
import uuid
from typing import Any, Callable, Dict, Optional

import httpx
from fastapi import HTTPException
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from app.config.settings import settings
from app.modules.agents.service import AgentService
from app.modules.chat.schemas import ChatRequest

logger = logging.getLogger(__name__)


async def _close_upstream(response: httpx.Response, client: httpx.AsyncClient) -> None:
    await response.aclose()
    await client.aclose()


class ChatProxyService:
    def __init__(
        self,
        client_factory: Callable[..., httpx.AsyncClient] = httpx.AsyncClient,
        webhook_url: Optional[str] = None,
        agents: Optional[AgentService] = None
    ):
        self.client_factory = client_factory
        self.webhook_url = settings.agent_webhook_url if webhook_url is None else webhook_url
        self.agents = agents

    def build_payload(
        self,
        chat: ChatRequest,
        user_id: str,
        session_id: str,
        agent: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        chat_input = chat.input
        if chat_input is not None and not isinstance(chat_input, str):
            chat_input = chat_input.model_dump(exclude_none=True)
        payload = {
            "messages": [m.model_dump() for m in chat.messages],
            "input": chat_input,
            "session_id": session_id,
            "user_id": user_id,
        }
        if chat.context:
            payload.update(chat.context.model_dump(exclude_none=True))
        if agent:
            # agent category wins over the context category
            if agent.get("category"):
                payload["category"] = agent["category"]
            if agent.get("system_prompt"):
                payload["system_prompt"] = agent["system_prompt"]
            payload["agent_name"] = agent.get("name")
        return payload

    def resolve_agent(self, chat: ChatRequest, user_id: str) -> Optional[Dict[str, Any]]:
        if not chat.agentId:
            return None
        if self.agents is None:
            raise HTTPException(status_code=404, detail="Agent not found or access denied")
        return self.agents.get_available_agent(chat.agentId, user_id)

    async def forward(self, chat: ChatRequest, user_id: str) -> StreamingResponse:
        agent = self.resolve_agent(chat, user_id)
        webhook_url = (agent or {}).get("webhook_url") or self.webhook_url
        if not webhook_url:
            logger.error("Chat request rejected: no agent webhook and AGENT_WEBHOOK_URL is not configured")
            raise HTTPException(status_code=500, detail="Agent webhook URL not configured")

        session_id = chat.session_id or str(uuid.uuid4())
        payload = self.build_payload(chat, user_id, session_id, agent)

        client = self.client_factory(timeout=httpx.Timeout(10.0, read=settings.agent_webhook_timeout_seconds))
        try:
            request = client.build_request("POST", webhook_url, json=payload)
            upstream = await client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            await client.aclose()
            logger.error(f"Agent webhook request failed: {e}")
            raise HTTPException(status_code=500, detail="Failed to reach agent webhook")

        if not upstream.is_success:
            status_code = upstream.status_code
            await _close_upstream(upstream, client)
            logger.error(f"Agent webhook returned {status_code}")
            raise HTTPException(status_code=500, detail=f"Agent webhook returned {status_code}")

        headers = {"X-Session-ID": session_id}
        content_type = upstream.headers.get("content-type")
        if content_type:
            headers["content-type"] = content_type

        return StreamingResponse(
            upstream.aiter_bytes(),
            status_code=upstream.status_code,
            headers=headers,
            background=BackgroundTask(_close_upstream, upstream, client)
        )

import logging
from datetime import datetime, timezone
from supabase import Client
from app.modules.agents.models import AGENT_COLUMNS
from app.modules.agents.schemas import AgentCreate, AgentUpdate, AgentResponse, UserAgentResponse
from app.core.validation import clean_name, is_valid_url
from typing import Any, Dict, Iterable, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class AgentService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_agent_row(self, agent_id: str) -> Dict[str, Any]:
        result = self.supabase.table("agents")\
            .select(AGENT_COLUMNS)\
            .eq("id", agent_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Agent not found")
        return result.data[0]

    def _assignments(self, agent_ids: List[str]) -> Dict[str, List[str]]:
        """agent id -> assigned user ids"""
        assigned: Dict[str, List[str]] = {agent_id: [] for agent_id in agent_ids}
        if not agent_ids:
            return assigned
        result = self.supabase.table("user_agents")\
            .select("agent_id, user_id")\
            .in_("agent_id", agent_ids)\
            .execute()
        for row in result.data or []:
            assigned.setdefault(row["agent_id"], []).append(row["user_id"])
        return assigned

    def _assigned_agent_ids(self, user_id: str) -> List[str]:
        result = self.supabase.table("user_agents")\
            .select("agent_id")\
            .eq("user_id", user_id)\
            .execute()
        return [row["agent_id"] for row in result.data or []]

    def _check_users_exist(self, user_ids: List[str]) -> None:
        if not user_ids:
            return
        result = self.supabase.table("users")\
            .select("id")\
            .in_("id", user_ids)\
            .execute()
        if len(result.data or []) != len(user_ids):
            raise HTTPException(status_code=404, detail="One or more users not found")

    def _replace_assignments(self, agent_id: str, user_ids: List[str]) -> None:
        self.supabase.table("user_agents")\
            .delete()\
            .eq("agent_id", agent_id)\
            .execute()
        if user_ids:
            self.supabase.table("user_agents")\
                .insert([{"agent_id": agent_id, "user_id": user_id} for user_id in user_ids])\
                .execute()

    def _with_assignments(self, rows: List[Dict[str, Any]]) -> List[AgentResponse]:
        assigned = self._assignments([row["id"] for row in rows])
        return [AgentResponse(**row, assigned_to=assigned.get(row["id"], [])) for row in rows]

    @staticmethod
    def _unique(user_ids: Optional[Iterable[str]]) -> List[str]:
        return list(dict.fromkeys(user_ids or []))

    @staticmethod
    def _clean_webhook_url(value: Optional[str]) -> Optional[str]:
        webhook_url = (value or "").strip()
        if webhook_url and not is_valid_url(webhook_url):
            raise HTTPException(status_code=400, detail="Invalid webhook URL format")
        return webhook_url or None

    def list_agents(self, user_id: Optional[str] = None) -> List[AgentResponse]:
        """All agents, global first then newest; with user_id, only those that user can use"""
        try:
            result = self.supabase.table("agents")\
                .select(AGENT_COLUMNS)\
                .order("is_global", desc=True)\
                .order("created_at", desc=True)\
                .execute()
            rows = result.data or []
            if user_id:
                assigned = set(self._assigned_agent_ids(user_id))
                rows = [row for row in rows if row.get("is_global") or row["id"] in assigned]
            return self._with_assignments(rows)
        except Exception as e:
            logger.error(f"Failed to fetch agents: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch agents")

    def create_agent(self, agent_data: AgentCreate) -> AgentResponse:
        name = clean_name(agent_data.name)
        system_prompt = (agent_data.system_prompt or "").strip()
        if not name or not system_prompt:
            raise HTTPException(status_code=400, detail="Name and system prompt are required")
        webhook_url = self._clean_webhook_url(agent_data.webhook_url)
        assigned_to = self._unique(agent_data.assigned_to)

        try:
            self._check_users_exist(assigned_to)

            result = self.supabase.table("agents").insert({
                "name": name,
                "description": agent_data.description or None,
                "system_prompt": system_prompt,
                "webhook_url": webhook_url,
                "category": agent_data.category or None,
                "is_active": agent_data.is_active is not False,
                "is_global": agent_data.is_global is not False
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create agent")

            agent = result.data[0]
            self._replace_assignments(agent["id"], assigned_to)
            logger.info(f"Created agent {agent['id']} assigned to {len(assigned_to)} user(s)")
            return AgentResponse(**agent, assigned_to=assigned_to)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to create agent: {e}")
            raise HTTPException(status_code=500, detail="Failed to create agent")

    def get_agent(self, agent_id: str) -> AgentResponse:
        try:
            return self._with_assignments([self._get_agent_row(agent_id)])[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to fetch agent {agent_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch agent")

    def update_agent(self, agent_id: str, agent_data: AgentUpdate) -> AgentResponse:
        provided = agent_data.model_fields_set
        try:
            self._get_agent_row(agent_id)

            update_data: Dict[str, Any] = {}
            if "name" in provided:
                name = clean_name(agent_data.name)
                if not name:
                    raise HTTPException(status_code=400, detail="Name cannot be empty")
                update_data["name"] = name
            if "system_prompt" in provided:
                system_prompt = (agent_data.system_prompt or "").strip()
                if not system_prompt:
                    raise HTTPException(status_code=400, detail="System prompt cannot be empty")
                update_data["system_prompt"] = system_prompt
            if "webhook_url" in provided:
                update_data["webhook_url"] = self._clean_webhook_url(agent_data.webhook_url)
            for field in ("description", "category"):
                if field in provided:
                    update_data[field] = getattr(agent_data, field) or None
            for field in ("is_active", "is_global"):
                if field in provided and getattr(agent_data, field) is not None:
                    update_data[field] = getattr(agent_data, field)

            assigned_to = None
            if "assigned_to" in provided:
                assigned_to = self._unique(agent_data.assigned_to)
                self._check_users_exist(assigned_to)

            if not update_data and assigned_to is None:
                raise HTTPException(status_code=400, detail="No fields to update")

            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table("agents")\
                .update(update_data)\
                .eq("id", agent_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Agent not found")

            if assigned_to is not None:
                self._replace_assignments(agent_id, assigned_to)

            return self._with_assignments([result.data[0]])[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to update agent {agent_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update agent")

    def delete_agent(self, agent_id: str) -> bool:
        try:
            self._get_agent_row(agent_id)
            self._replace_assignments(agent_id, [])
            self.supabase.table("agents")\
                .delete()\
                .eq("id", agent_id)\
                .execute()
            logger.info(f"Deleted agent {agent_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to delete agent {agent_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete agent")

    def delete_assignments_for_user(self, user_id: str) -> None:
        self.supabase.table("user_agents")\
            .delete()\
            .eq("user_id", user_id)\
            .execute()

    def _available_rows(self, user_id: str) -> List[Dict[str, Any]]:
        result = self.supabase.table("agents")\
            .select(AGENT_COLUMNS)\
            .eq("is_active", True)\
            .order("is_global", desc=True)\
            .order("name")\
            .execute()
        assigned = set(self._assigned_agent_ids(user_id))
        return [row for row in result.data or [] if row.get("is_global") or row["id"] in assigned]

    def list_user_agents(self, user_id: str) -> List[UserAgentResponse]:
        """Active agents the user can chat with"""
        try:
            return [UserAgentResponse(**row) for row in self._available_rows(user_id)]
        except Exception as e:
            logger.error(f"Failed to fetch agents for user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch agents")

    def get_available_agent(self, agent_id: str, user_id: str) -> Dict[str, Any]:
        """The agent row if it is active and global or assigned to the user, else 404"""
        try:
            result = self.supabase.table("agents")\
                .select(AGENT_COLUMNS)\
                .eq("id", agent_id)\
                .eq("is_active", True)\
                .limit(1)\
                .execute()
            agent = result.data[0] if result.data else None
            if agent and not agent.get("is_global") and agent_id not in self._assigned_agent_ids(user_id):
                agent = None
        except Exception as e:
            logger.error(f"Failed to fetch agent {agent_id} for user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch agent")

        if agent is None:
            raise HTTPException(status_code=404, detail="Agent not found or access denied")
        return agent

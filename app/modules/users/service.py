import logging
from datetime import datetime, timezone
from supabase import Client
from app.modules.users.schemas import AdminUserCreate, AdminUserUpdate, UserResponse
from app.modules.agents.service import AgentService
from app.modules.projects.service import ProjectService
from app.modules.sessions.service import SessionStore
from app.core.security import hash_password
from app.core.validation import is_valid_email, is_valid_url
from typing import Any, Dict, List
from fastapi import HTTPException

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, email, name, avatar_url, email_verified, webhook_url, created_at, updated_at"


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_user_row(self, user_id: str) -> Dict[str, Any]:
        result = self.supabase.table("users")\
            .select(USER_COLUMNS)\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="User not found")
        return result.data[0]

    def list_users(self) -> List[UserResponse]:
        """All users, newest first"""
        try:
            result = self.supabase.table("users")\
                .select(USER_COLUMNS)\
                .order("created_at", desc=True)\
                .execute()
            return [UserResponse(**user) for user in result.data or []]
        except Exception as e:
            logger.error(f"Failed to fetch users: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch users")

    def create_user(self, user_data: AdminUserCreate) -> UserResponse:
        """Create a verified user on behalf of an admin"""
        email = (user_data.email or "").strip()
        if not email or not user_data.password:
            raise HTTPException(status_code=400, detail="Email and password are required")
        if not is_valid_email(email):
            raise HTTPException(status_code=400, detail="Invalid email format")

        try:
            existing = self.supabase.table("users")\
                .select("id")\
                .eq("email", email)\
                .limit(1)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=400, detail="User with this email already exists")

            result = self.supabase.table("users").insert({
                "email": email,
                "password_hash": hash_password(user_data.password),
                "name": user_data.name or None,
                "email_verified": True
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create user")

            user = UserResponse(**result.data[0])
            logger.info(f"Admin created user {user.id}")
            return user
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to create user: {e}")
            raise HTTPException(status_code=500, detail="Failed to create user")

    def get_user(self, user_id: str) -> UserResponse:
        try:
            return UserResponse(**self._get_user_row(user_id))
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to fetch user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch user")

    def update_user(self, user_id: str, user_data: AdminUserUpdate) -> UserResponse:
        provided = user_data.model_fields_set
        try:
            self._get_user_row(user_id)

            update_data: Dict[str, Any] = {}
            if user_data.email:
                email = user_data.email.strip()
                if not is_valid_email(email):
                    raise HTTPException(status_code=400, detail="Invalid email format")
                taken = self.supabase.table("users")\
                    .select("id")\
                    .eq("email", email)\
                    .neq("id", user_id)\
                    .limit(1)\
                    .execute()
                if taken.data:
                    raise HTTPException(status_code=400, detail="Email is already in use")
                update_data["email"] = email

            if "name" in provided:
                update_data["name"] = user_data.name or None

            if "webhook_url" in provided:
                webhook_url = (user_data.webhook_url or "").strip()
                if webhook_url and not is_valid_url(webhook_url):
                    raise HTTPException(status_code=400, detail="Invalid webhook URL format")
                update_data["webhook_url"] = webhook_url or None

            if user_data.password:
                update_data["password_hash"] = hash_password(user_data.password)

            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")

            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table("users")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")

            return UserResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to update user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update user")

    def delete_user(self, user_id: str) -> bool:
        """Delete the user's project trees, sessions, agent assignments and Supabase config, then the user"""
        try:
            self._get_user_row(user_id)

            removed_projects = ProjectService(self.supabase).delete_all_for_user(user_id)
            SessionStore(self.supabase, "user").invalidate_all(user_id)
            AgentService(self.supabase).delete_assignments_for_user(user_id)
            self.supabase.table("user_supabase_config")\
                .delete()\
                .eq("user_id", user_id)\
                .execute()
            self.supabase.table("users")\
                .delete()\
                .eq("id", user_id)\
                .execute()

            logger.info(f"Deleted user {user_id} with {removed_projects} project(s)")
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to delete user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete user")

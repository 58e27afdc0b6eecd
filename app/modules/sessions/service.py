from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

from fastapi import HTTPException
from pydantic import BaseModel
from supabase import Client

from app.config.settings import settings
from app.core.security import TokenPayload, TokenType, create_access_token, verify_token

logger = logging.getLogger(__name__)

_STORES = {
    "user": ("sessions", "user_id"),
    "admin": ("admin_sessions", "admin_id"),
}


class SessionValidationResult(BaseModel):
    valid: bool
    session: Optional[Dict[str, Any]] = None
    payload: Optional[TokenPayload] = None
    error: Optional[str] = None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SessionStore:
    """Database-backed sessions for one credential space (users or admins)."""

    def __init__(self, supabase: Client, kind: TokenType = "user"):
        self.supabase = supabase
        self.kind = kind
        self.table, self.owner_column = _STORES[kind]

    def create(self, subject_id: str, email: str) -> Dict[str, Any]:
        token = create_access_token(subject_id, email, self.kind)
        expires_at = datetime.now(timezone.utc) + timedelta(hours=settings.session_ttl_hours)
        row = {
            self.owner_column: subject_id,
            "token": token,
            "expires_at": expires_at.isoformat(),
        }
        if self.kind == "admin":
            row["email"] = email
        result = self.supabase.table(self.table).insert(row).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create session")
        return result.data[0]

    def validate(self, token: Optional[str]) -> SessionValidationResult:
        jwt_result = verify_token(token)
        if not jwt_result.valid or not jwt_result.payload:
            return SessionValidationResult(valid=False, error=jwt_result.error or "Invalid token")

        if jwt_result.payload.type != self.kind:
            error = "Not an admin token" if self.kind == "admin" else "Not a user token"
            return SessionValidationResult(valid=False, error=error)

        try:
            result = self.supabase.table(self.table)\
                .select("*")\
                .eq("token", token)\
                .gt("expires_at", _now_iso())\
                .order("created_at", desc=True)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Session lookup failed in {self.table}: {e}")
            return SessionValidationResult(valid=False, error="Session lookup failed")

        if not result.data:
            return SessionValidationResult(valid=False, error="Session not found or expired")

        return SessionValidationResult(valid=True, session=result.data[0], payload=jwt_result.payload)

    def invalidate(self, token: str) -> None:
        self.supabase.table(self.table)\
            .delete()\
            .eq("token", token)\
            .execute()

    def invalidate_all(self, subject_id: str) -> int:
        result = self.supabase.table(self.table)\
            .delete()\
            .eq(self.owner_column, subject_id)\
            .execute()
        return len(result.data or [])

    def cleanup_expired(self) -> int:
        """Delete rows whose expiry has passed; returns how many were removed."""
        result = self.supabase.table(self.table)\
            .delete()\
            .lte("expires_at", _now_iso())\
            .execute()
        return len(result.data or [])

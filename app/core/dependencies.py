"""
Core dependencies for route protection
"""

from typing import Any, Callable, Dict, Optional
import logging

import httpx
from fastapi import Cookie, Depends, HTTPException, Response, status
from supabase import Client

from app.config.settings import settings
from app.database.supabase_client import get_supabase
from app.modules.sessions.service import SessionStore

logger = logging.getLogger(__name__)

USER_COOKIE = "auth_token"
ADMIN_COOKIE = "admin_session"
ADMIN_COOKIE_FALLBACK = "admin_token"


def get_user_session_store(supabase: Client = Depends(get_supabase)) -> SessionStore:
    return SessionStore(supabase, "user")


def get_admin_session_store(supabase: Client = Depends(get_supabase)) -> SessionStore:
    return SessionStore(supabase, "admin")


def get_current_user(
    auth_token: Optional[str] = Cookie(default=None),
    sessions: SessionStore = Depends(get_user_session_store)
) -> Dict[str, Any]:
    """Resolve the caller from the auth_token cookie; 401 when missing or invalid."""
    if not auth_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    result = sessions.validate(auth_token)
    if not result.valid or not result.payload:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=result.error or "Invalid session")
    return {
        "id": result.payload.user_id,
        "email": result.payload.email,
        "token": auth_token,
        "expires_at": result.session.get("expires_at") if result.session else None,
    }


def get_current_admin(
    admin_session: Optional[str] = Cookie(default=None),
    admin_token: Optional[str] = Cookie(default=None),
    sessions: SessionStore = Depends(get_admin_session_store)
) -> Dict[str, Any]:
    """Resolve the admin from the admin_session cookie (admin_token is accepted too)."""
    token = admin_session or admin_token
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    result = sessions.validate(token)
    if not result.valid or not result.payload:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=result.error or "Unauthorized")
    return {
        "id": result.payload.user_id,
        "email": result.payload.email,
        "token": token,
        "expires_at": result.session.get("expires_at") if result.session else None,
    }


def get_http_client_factory() -> Callable[..., httpx.AsyncClient]:
    """Factory for outbound clients; overridden in tests with a mock transport."""
    return httpx.AsyncClient


def set_session_cookie(response: Response, name: str, token: str) -> None:
    response.set_cookie(
        key=name,
        value=token,
        max_age=settings.session_ttl_hours * 60 * 60,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def clear_session_cookie(response: Response, name: str) -> None:
    response.set_cookie(
        key=name,
        value="",
        max_age=0,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )

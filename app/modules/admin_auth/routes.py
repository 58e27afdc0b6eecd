from fastapi import APIRouter, Cookie, Depends, HTTPException, Request, Response
from app.database.supabase_client import get_supabase
from app.modules.admin_auth.schemas import AdminAuthRequest, AdminAuthResponse, AdminSessionResponse
from app.modules.admin_auth.service import AdminAuthService
from app.modules.sessions.service import SessionStore
from app.core.dependencies import ADMIN_COOKIE, ADMIN_COOKIE_FALLBACK, get_admin_session_store, set_session_cookie, clear_session_cookie
from app.core.rate_limit import limiter
from app.config.settings import settings
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/admin/auth", tags=["admin-auth"])


def get_admin_auth_service(
    supabase: Client = Depends(get_supabase),
    sessions: SessionStore = Depends(get_admin_session_store)
) -> AdminAuthService:
    return AdminAuthService(supabase, sessions)


@router.post("", response_model=AdminAuthResponse, response_model_exclude_none=True)
@limiter.limit(settings.login_rate_limit)
async def admin_auth(
    request: Request,
    response: Response,
    data: AdminAuthRequest,
    admin_session: Optional[str] = Cookie(default=None),
    admin_token: Optional[str] = Cookie(default=None),
    service: AdminAuthService = Depends(get_admin_auth_service)
):
    """Admin login, first-admin creation, or logout, selected by `action`"""
    if data.action == "login":
        body, token = service.login(data)
        set_session_cookie(response, ADMIN_COOKIE, token)
        return body
    if data.action == "create":
        return service.create_first_admin(data)
    if data.action == "logout":
        body = service.logout(admin_session or admin_token)
        clear_session_cookie(response, ADMIN_COOKIE)
        clear_session_cookie(response, ADMIN_COOKIE_FALLBACK)
        return body
    raise HTTPException(status_code=400, detail="Invalid action")


@router.get("", response_model=AdminSessionResponse, response_model_exclude_none=True)
async def admin_session_status(
    admin_session: Optional[str] = Cookie(default=None),
    admin_token: Optional[str] = Cookie(default=None),
    service: AdminAuthService = Depends(get_admin_auth_service)
):
    """Check the admin session cookie"""
    return service.get_session(admin_session or admin_token)

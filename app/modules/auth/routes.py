from fastapi import APIRouter, Cookie, Depends, HTTPException, Request, Response
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import LoginRequest, LoginResponse, SessionResponse, SignOutResponse
from app.modules.auth.service import AuthService
from app.modules.sessions.service import SessionStore
from app.core.dependencies import USER_COOKIE, get_user_session_store, set_session_cookie, clear_session_cookie
from app.core.rate_limit import limiter
from app.config.settings import settings
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    sessions: SessionStore = Depends(get_user_session_store)
) -> AuthService:
    return AuthService(supabase, sessions)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request,
    response: Response,
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login with email/password and receive the auth_token cookie"""
    body, token = service.login(login_data)
    set_session_cookie(response, USER_COOKIE, token)
    return body


@router.get("/session", response_model=SessionResponse)
async def get_session(
    auth_token: Optional[str] = Cookie(default=None),
    service: AuthService = Depends(get_auth_service)
):
    """Report whether the auth_token cookie belongs to a live session"""
    return service.get_session(auth_token)


@router.post("/sign-out", response_model=SignOutResponse)
async def sign_out(
    response: Response,
    auth_token: Optional[str] = Cookie(default=None),
    service: AuthService = Depends(get_auth_service)
):
    """Invalidate the session and clear the cookie"""
    service.sign_out(auth_token)
    clear_session_cookie(response, USER_COOKIE)
    return SignOutResponse()


@router.post("/register", status_code=403)
async def register():
    """Self-registration is disabled; admins create users"""
    raise HTTPException(
        status_code=403,
        detail="Self-registration is not allowed. Please contact your administrator to create an account."
    )

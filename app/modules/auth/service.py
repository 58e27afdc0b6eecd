import logging
from supabase import Client
from app.modules.auth.schemas import LoginRequest, LoginResponse, SessionResponse, SessionUser, UserSummary
from app.modules.sessions.service import SessionStore
from app.core.security import verify_password
from app.core.validation import is_valid_email
from fastapi import HTTPException
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, supabase: Client, sessions: SessionStore):
        self.supabase = supabase
        self.sessions = sessions

    def login(self, login_data: LoginRequest) -> Tuple[LoginResponse, str]:
        """Check credentials and open a session. Returns the response body and the session token."""
        if not login_data.email or not login_data.password:
            raise HTTPException(status_code=400, detail="Email and password are required")
        if not is_valid_email(login_data.email):
            raise HTTPException(status_code=400, detail="Invalid email format")

        try:
            result = self.supabase.table("users")\
                .select("id, email, name, password_hash")\
                .eq("email", login_data.email)\
                .limit(1)\
                .execute()

            user = result.data[0] if result.data else None
            # Same message for unknown email and wrong password
            if not user or not verify_password(login_data.password, user.get("password_hash")):
                raise HTTPException(status_code=401, detail="Invalid email or password")

            session = self.sessions.create(user["id"], user["email"])
            body = LoginResponse(
                user=UserSummary(id=user["id"], email=user["email"], name=user.get("name"))
            )
            return body, session["token"]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Login error: {e}")
            raise HTTPException(status_code=500, detail="Login failed. Please try again.")

    def get_session(self, token: Optional[str]) -> SessionResponse:
        """Describe the current session; never raises for an invalid token."""
        if not token:
            return SessionResponse(authenticated=False)
        try:
            result = self.sessions.validate(token)
            if not result.valid or not result.payload:
                return SessionResponse(authenticated=False)

            user_result = self.supabase.table("users")\
                .select("id, email, name, avatar_url")\
                .eq("id", result.payload.user_id)\
                .limit(1)\
                .execute()
            if not user_result.data:
                return SessionResponse(authenticated=False)

            return SessionResponse(
                authenticated=True,
                user=SessionUser(**user_result.data[0]),
                expiresAt=result.session.get("expires_at") if result.session else None
            )
        except Exception as e:
            logger.error(f"Session validation error: {e}")
            return SessionResponse(authenticated=False)

    def sign_out(self, token: Optional[str]) -> None:
        if not token:
            return
        try:
            self.sessions.invalidate(token)
        except Exception as e:
            # The cookie is cleared regardless
            logger.error(f"Sign out error: {e}")

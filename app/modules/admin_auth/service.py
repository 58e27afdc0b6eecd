import logging
from supabase import Client
from app.modules.admin_auth.schemas import AdminAuthRequest, AdminAuthResponse, AdminSessionResponse, AdminSummary
from app.modules.sessions.service import SessionStore
from app.core.security import hash_password, verify_password
from app.core.validation import is_valid_email
from fastapi import HTTPException
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class AdminAuthService:
    def __init__(self, supabase: Client, sessions: SessionStore):
        self.supabase = supabase
        self.sessions = sessions

    def login(self, data: AdminAuthRequest) -> Tuple[AdminAuthResponse, str]:
        """Authenticate an active admin. Returns the response body and the session token."""
        if not data.email or not data.password:
            raise HTTPException(status_code=400, detail="Email and password are required")
        if not is_valid_email(data.email):
            raise HTTPException(status_code=400, detail="Invalid email format")

        try:
            result = self.supabase.table("admin_users")\
                .select("*")\
                .eq("email", data.email)\
                .eq("is_active", True)\
                .limit(1)\
                .execute()

            admin = result.data[0] if result.data else None
            # Generic message prevents admin email enumeration
            if not admin or not verify_password(data.password, admin.get("password_hash")):
                raise HTTPException(status_code=401, detail="Invalid credentials")

            session = self.sessions.create(admin["id"], admin["email"])
            body = AdminAuthResponse(
                user=AdminSummary(id=admin["id"], email=admin["email"], name=admin.get("name"))
            )
            return body, session["token"]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Admin auth error: {e}")
            raise HTTPException(status_code=500, detail="Authentication failed")

    def create_first_admin(self, data: AdminAuthRequest) -> AdminAuthResponse:
        """Bootstrap the first admin account; refused once any admin exists."""
        try:
            existing = self.supabase.table("admin_users")\
                .select("id")\
                .limit(1)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=400, detail="Admin already exists. Use login action.")

            if not data.email or not data.password or not data.name:
                raise HTTPException(status_code=400, detail="Email, password, and name are required")
            if not is_valid_email(data.email):
                raise HTTPException(status_code=400, detail="Invalid email format")
            if len(data.password) < MIN_PASSWORD_LENGTH:
                raise HTTPException(
                    status_code=400,
                    detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
                )

            result = self.supabase.table("admin_users").insert({
                "email": data.email,
                "password_hash": hash_password(data.password),
                "name": data.name,
                "is_active": True
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create admin")

            admin = result.data[0]
            logger.info(f"Created first admin account {admin['id']}")
            return AdminAuthResponse(
                user=AdminSummary(id=admin["id"], email=admin["email"], name=admin.get("name"))
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Admin creation error: {e}")
            raise HTTPException(status_code=500, detail="Authentication failed")

    def logout(self, token: Optional[str]) -> AdminAuthResponse:
        if token:
            try:
                self.sessions.invalidate(token)
            except Exception as e:
                logger.error(f"Admin logout error: {e}")
        return AdminAuthResponse()

    def get_session(self, token: Optional[str]) -> AdminSessionResponse:
        if not token:
            return AdminSessionResponse(authenticated=False)
        try:
            result = self.sessions.validate(token)
            if not result.valid or not result.payload:
                return AdminSessionResponse(authenticated=False)

            admin_result = self.supabase.table("admin_users")\
                .select("id, email, name")\
                .eq("id", result.payload.user_id)\
                .limit(1)\
                .execute()
            if not admin_result.data:
                return AdminSessionResponse(authenticated=False)

            return AdminSessionResponse(
                authenticated=True,
                user=AdminSummary(**admin_result.data[0]),
                expiresAt=result.session.get("expires_at") if result.session else None
            )
        except Exception as e:
            logger.error(f"Admin session check error: {e}")
            return AdminSessionResponse(authenticated=False)

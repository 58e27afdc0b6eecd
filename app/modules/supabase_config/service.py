import logging
from datetime import datetime, timezone
from supabase import Client
from app.modules.supabase_config.models import DEFAULT_BUCKET_NAME
from app.modules.supabase_config.schemas import SupabaseConfigSave, SupabaseConfigStatus, ConnectionTestResult
from app.core.encryption import decrypt, encrypt
from app.core.validation import is_valid_url
from app.database.supabase_client import create_user_supabase_client
from typing import Any, Callable, Dict, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

UserClientFactory = Callable[[str, str], Any]


def is_supabase_configured(supabase: Client, user_id: str) -> bool:
    """True when the user has a saved config flagged as configured"""
    result = supabase.table("user_supabase_config")\
        .select("is_configured")\
        .eq("user_id", user_id)\
        .limit(1)\
        .execute()
    return bool(result.data) and result.data[0].get("is_configured") is True


class SupabaseConfigService:
    def __init__(self, supabase: Client, client_factory: UserClientFactory = create_user_supabase_client):
        self.supabase = supabase
        self.client_factory = client_factory

    def _get_row(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("user_supabase_config")\
            .select("*")\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def get_status(self, user_id: str) -> SupabaseConfigStatus:
        try:
            row = self._get_row(user_id)
            if not row:
                return SupabaseConfigStatus(is_configured=False)
            return SupabaseConfigStatus(
                is_configured=bool(row.get("is_configured")),
                last_verified_at=row.get("last_verified_at"),
                project_bucket_name=row.get("project_bucket_name"),
                use_service_role=bool(row.get("use_service_role")),
                has_service_role=row.get("service_role_secret") is not None,
                created_at=row.get("created_at")
            )
        except Exception as e:
            logger.error(f"Failed to fetch Supabase config for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch configuration")

    def save(self, user_id: str, data: SupabaseConfigSave) -> bool:
        """Insert or update the config; keys not sent keep their stored value"""
        if not data.supabaseUrl:
            raise HTTPException(status_code=400, detail="Supabase URL is required")
        if not is_valid_url(data.supabaseUrl):
            raise HTTPException(status_code=400, detail="Invalid Supabase URL format")
        if not data.supabaseAnonKey and not data.serviceRoleSecret:
            raise HTTPException(
                status_code=400,
                detail="At least one key (Anon Key or Service Role Secret) is required"
            )

        try:
            user_result = self.supabase.table("users")\
                .select("id")\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
            if not user_result.data:
                raise HTTPException(status_code=404, detail="User not found")

            values = {
                "supabase_url": encrypt(data.supabaseUrl.strip()),
                "project_bucket_name": data.projectBucketName or DEFAULT_BUCKET_NAME,
                "is_configured": True,
                "use_service_role": data.useServiceRole is True,
            }
            encrypted_anon = encrypt(data.supabaseAnonKey) if data.supabaseAnonKey else None
            encrypted_service = encrypt(data.serviceRoleSecret) if data.serviceRoleSecret else None

            existing = self._get_row(user_id)
            if existing:
                values["supabase_anon_key"] = encrypted_anon or existing.get("supabase_anon_key")
                values["service_role_secret"] = encrypted_service or existing.get("service_role_secret")
                values["updated_at"] = datetime.now(timezone.utc).isoformat()
                self.supabase.table("user_supabase_config")\
                    .update(values)\
                    .eq("user_id", user_id)\
                    .execute()
            else:
                values["user_id"] = user_id
                values["supabase_anon_key"] = encrypted_anon
                values["service_role_secret"] = encrypted_service
                self.supabase.table("user_supabase_config").insert(values).execute()

            logger.info(f"Saved Supabase config for user {user_id}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to save Supabase config for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to save configuration")

    def delete(self, user_id: str) -> bool:
        try:
            self.supabase.table("user_supabase_config")\
                .delete()\
                .eq("user_id", user_id)\
                .execute()
            return True
        except Exception as e:
            logger.error(f"Failed to delete Supabase config for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete configuration")

    def test_connection(self, user_id: str) -> ConnectionTestResult:
        """List storage buckets in the user's Supabase with the preferred key"""
        row = self._get_row(user_id)
        if not row or not row.get("is_configured"):
            return ConnectionTestResult(
                success=False,
                error="Supabase not configured for user",
                credentialType="anon"
            )

        has_service_role = row.get("service_role_secret") is not None
        use_service_role = has_service_role and (
            row.get("use_service_role") is True or row.get("supabase_anon_key") is None
        )
        credential_type = "service_role" if use_service_role else "anon"

        try:
            url = decrypt(row["supabase_url"])
            key = decrypt(row["service_role_secret"] if use_service_role else row["supabase_anon_key"])
            client = self.client_factory(url, key)
            client.storage.list_buckets()
        except Exception as e:
            logger.warning(f"Supabase connection test failed for user {user_id}: {e}")
            return ConnectionTestResult(success=False, error=str(e) or "Connection failed", credentialType=credential_type)

        try:
            self.supabase.table("user_supabase_config")\
                .update({"last_verified_at": datetime.now(timezone.utc).isoformat()})\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Failed to stamp last_verified_at for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Connection test failed")

        return ConnectionTestResult(success=True, credentialType=credential_type)

from pydantic import BaseModel
from typing import Literal, Optional
from datetime import datetime


class SupabaseConfigSave(BaseModel):
    supabaseUrl: Optional[str] = None
    supabaseAnonKey: Optional[str] = None
    serviceRoleSecret: Optional[str] = None
    projectBucketName: Optional[str] = None
    useServiceRole: Optional[bool] = None


class SupabaseConfigStatus(BaseModel):
    is_configured: bool = False
    last_verified_at: Optional[datetime] = None
    project_bucket_name: Optional[str] = None
    use_service_role: Optional[bool] = None
    has_service_role: Optional[bool] = None
    created_at: Optional[datetime] = None


class ConnectionTestResult(BaseModel):
    success: bool
    error: Optional[str] = None
    credentialType: Literal["anon", "service_role"]

from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase, create_user_supabase_client
from app.modules.supabase_config.schemas import SupabaseConfigSave, SupabaseConfigStatus, ConnectionTestResult
from app.modules.supabase_config.service import SupabaseConfigService, UserClientFactory
from app.modules.users.schemas import SuccessResponse
from app.core.dependencies import get_current_admin
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/admin/users/{user_id}/supabase-config", tags=["supabase-config"])


def get_user_client_factory() -> UserClientFactory:
    return create_user_supabase_client


def get_supabase_config_service(
    supabase: Client = Depends(get_supabase),
    client_factory: UserClientFactory = Depends(get_user_client_factory)
) -> SupabaseConfigService:
    return SupabaseConfigService(supabase, client_factory)


@router.get("", response_model=SupabaseConfigStatus, response_model_exclude_none=True)
async def get_supabase_config(
    user_id: str,
    admin: Dict = Depends(get_current_admin),
    service: SupabaseConfigService = Depends(get_supabase_config_service)
):
    """Config status without any secret values"""
    return service.get_status(user_id)


@router.post("", response_model=SuccessResponse)
async def save_supabase_config(
    user_id: str,
    data: SupabaseConfigSave,
    admin: Dict = Depends(get_current_admin),
    service: SupabaseConfigService = Depends(get_supabase_config_service)
):
    """Save or update a user's Supabase credentials (encrypted at rest)"""
    service.save(user_id, data)
    return SuccessResponse()


@router.delete("", response_model=SuccessResponse)
async def delete_supabase_config(
    user_id: str,
    admin: Dict = Depends(get_current_admin),
    service: SupabaseConfigService = Depends(get_supabase_config_service)
):
    """Remove a user's Supabase credentials"""
    service.delete(user_id)
    return SuccessResponse()


@router.post("/test", response_model=ConnectionTestResult, response_model_exclude_none=True)
async def test_supabase_config(
    user_id: str,
    admin: Dict = Depends(get_current_admin),
    service: SupabaseConfigService = Depends(get_supabase_config_service)
):
    """Try the stored credentials against the user's Supabase"""
    return service.test_connection(user_id)

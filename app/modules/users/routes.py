from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.users.schemas import (
    AdminUserCreate, AdminUserUpdate, UserListResponse, UserEnvelope,
    UserMutationResponse, SuccessResponse
)
from app.modules.users.service import UserService
from app.core.dependencies import get_current_admin
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/admin/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


@router.get("", response_model=UserListResponse)
async def list_users(
    admin: Dict = Depends(get_current_admin),
    service: UserService = Depends(get_user_service)
):
    """List all users (admin only)"""
    return UserListResponse(users=service.list_users())


@router.post("", response_model=UserMutationResponse)
async def create_user(
    user_data: AdminUserCreate,
    admin: Dict = Depends(get_current_admin),
    service: UserService = Depends(get_user_service)
):
    """Create a user account (admin only)"""
    return UserMutationResponse(user=service.create_user(user_data))


@router.get("/{user_id}", response_model=UserEnvelope)
async def get_user(
    user_id: str,
    admin: Dict = Depends(get_current_admin),
    service: UserService = Depends(get_user_service)
):
    """Get a single user (admin only)"""
    return UserEnvelope(user=service.get_user(user_id))


@router.patch("/{user_id}", response_model=UserMutationResponse)
async def update_user(
    user_id: str,
    user_data: AdminUserUpdate,
    admin: Dict = Depends(get_current_admin),
    service: UserService = Depends(get_user_service)
):
    """Update email, name, password or webhook URL (admin only)"""
    return UserMutationResponse(user=service.update_user(user_id, user_data))


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: str,
    admin: Dict = Depends(get_current_admin),
    service: UserService = Depends(get_user_service)
):
    """Delete a user and everything they own (admin only)"""
    service.delete_user(user_id)
    return SuccessResponse()

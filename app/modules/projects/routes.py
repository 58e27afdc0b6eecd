from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from app.database.supabase_client import get_supabase
from app.modules.projects.schemas import (
    ProjectCreate, ProjectUpdate, ProjectListResponse, ProjectEnvelope, ProjectDetailResponse,
    SubProjectCreate, SubProjectListResponse, SubProjectEnvelope, SuccessResponse,
    ProjectFileCreate, ProjectFileUpdate, ProjectFileListResponse, ProjectFileEnvelope,
    ProjectFileCreatedResponse, ProjectFileMutationResponse
)
from app.modules.projects.service import ProjectService
from app.modules.supabase_config.service import is_supabase_configured
from app.modules.webhooks.notifier import FILE_CREATED, FILE_UPDATED, UserWebhookNotifier
from app.core.dependencies import get_current_user, get_http_client_factory
from supabase import Client
from typing import Callable, Dict
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user/projects", tags=["projects"])


def get_project_service(supabase: Client = Depends(get_supabase)) -> ProjectService:
    return ProjectService(supabase)


def get_file_notifier(
    supabase: Client = Depends(get_supabase),
    client_factory: Callable = Depends(get_http_client_factory)
) -> UserWebhookNotifier:
    return UserWebhookNotifier(supabase, client_factory)


def require_supabase_configured(
    user_data: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_supabase)
) -> Dict:
    """Projects need the user's own Supabase; 403 until an admin configures it"""
    try:
        configured = is_supabase_configured(supabase, user_data["id"])
    except Exception as e:
        logger.error(f"Error checking Supabase config for {user_data['id']}: {e}")
        raise HTTPException(status_code=500, detail="Failed to check Supabase configuration")
    if not configured:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Supabase not configured. Please contact administrator."
        )
    return user_data


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    user_data: Dict = Depends(require_supabase_configured),
    service: ProjectService = Depends(get_project_service)
):
    """List the caller's projects"""
    return ProjectListResponse(projects=service.list_projects(user_data["id"]))


@router.post("", response_model=ProjectEnvelope)
async def create_project(
    project_data: ProjectCreate,
    user_data: Dict = Depends(require_supabase_configured),
    service: ProjectService = Depends(get_project_service)
):
    """Create a project owned by the caller"""
    return ProjectEnvelope(project=service.create_project(user_data["id"], project_data))


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_project(
    project_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """Project with sub-projects and file listings"""
    return service.get_project_detail(project_id, user_data["id"])


@router.patch("/{project_id}", response_model=ProjectEnvelope)
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """Partial update of a project"""
    return ProjectEnvelope(project=service.update_project(project_id, user_data["id"], project_data))


@router.delete("/{project_id}", response_model=SuccessResponse)
async def delete_project(
    project_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """Delete a project and everything under it"""
    service.delete_project(project_id, user_data["id"])
    return SuccessResponse()


@router.get("/{project_id}/sub-projects", response_model=SubProjectListResponse)
async def list_sub_projects(
    project_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """List sub-projects of an owned project"""
    return SubProjectListResponse(sub_projects=service.list_sub_projects(project_id, user_data["id"]))


@router.post("/{project_id}/sub-projects", response_model=SubProjectEnvelope)
async def create_sub_project(
    project_id: str,
    sub_project_data: SubProjectCreate,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """Create a sub-project inside an owned project"""
    return SubProjectEnvelope(sub_project=service.create_sub_project(project_id, user_data["id"], sub_project_data))


@router.delete("/sub-projects/{sub_project_id}", response_model=SuccessResponse)
async def delete_sub_project(
    sub_project_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """Delete a sub-project and its files"""
    service.delete_sub_project(sub_project_id, user_data["id"])
    return SuccessResponse()


@router.get("/sub-projects/{sub_project_id}/files", response_model=ProjectFileListResponse)
async def list_files(
    sub_project_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """List files of an owned sub-project, by name"""
    return ProjectFileListResponse(files=service.list_files(sub_project_id, user_data["id"]))


@router.post("/sub-projects/{sub_project_id}/files", response_model=ProjectFileCreatedResponse)
async def create_file(
    sub_project_id: str,
    file_data: ProjectFileCreate,
    background_tasks: BackgroundTasks,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
    notifier: UserWebhookNotifier = Depends(get_file_notifier)
):
    """Create a file and notify the user's webhook"""
    created = service.create_file(sub_project_id, user_data["id"], file_data)
    background_tasks.add_task(notifier.notify_file_event, FILE_CREATED, user_data["id"], created.id)
    return ProjectFileCreatedResponse(fileId=created.id)


@router.get("/sub-projects/files/{file_id}", response_model=ProjectFileEnvelope)
async def get_file(
    file_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    """A file with its content"""
    return ProjectFileEnvelope(file=service.get_file(file_id, user_data["id"]))


@router.put("/sub-projects/files/{file_id}", response_model=ProjectFileMutationResponse)
async def update_file(
    file_id: str,
    file_data: ProjectFileUpdate,
    background_tasks: BackgroundTasks,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
    notifier: UserWebhookNotifier = Depends(get_file_notifier)
):
    """Replace a file's content and notify the user's webhook"""
    updated = service.update_file(file_id, user_data["id"], file_data)
    background_tasks.add_task(notifier.notify_file_event, FILE_UPDATED, user_data["id"], updated.id)
    return ProjectFileMutationResponse(file=updated)


@router.delete("/sub-projects/files/{file_id}", response_model=SuccessResponse)
async def delete_file(
    file_id: str,
    user_data: Dict = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service)
):
    service.delete_file(file_id, user_data["id"])
    return SuccessResponse()

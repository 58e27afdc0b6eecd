from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class ProjectCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None


class ProjectUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None


class ProjectResponse(BaseModel):
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    sort_order: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None


class ProjectWithCountsResponse(ProjectResponse):
    sub_projects_count: int = 0
    total_files_count: int = 0


class SubProjectCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None


class SubProjectResponse(BaseModel):
    id: str
    project_id: str
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    sort_order: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProjectFileSummary(BaseModel):
    id: str
    name: str
    file_type: Optional[str] = None
    size_bytes: Optional[int] = None
    updated_at: Optional[datetime] = None


class SubProjectWithFilesResponse(SubProjectResponse):
    files: List[ProjectFileSummary] = []


class ProjectListResponse(BaseModel):
    projects: List[ProjectWithCountsResponse]


class ProjectEnvelope(BaseModel):
    project: ProjectResponse


class ProjectDetailResponse(BaseModel):
    project: ProjectResponse
    sub_projects: List[SubProjectWithFilesResponse]


class SubProjectListResponse(BaseModel):
    sub_projects: List[SubProjectResponse]


class SubProjectEnvelope(BaseModel):
    sub_project: SubProjectResponse


class SuccessResponse(BaseModel):
    success: bool = True


class ProjectFileCreate(BaseModel):
    name: Optional[str] = None
    content: Optional[str] = None
    fileType: Optional[str] = None
    category: Optional[str] = None
    subCategory: Optional[str] = None
    description: Optional[str] = None


class ProjectFileUpdate(BaseModel):
    content: Optional[str] = None


class ProjectFileResponse(BaseModel):
    id: str
    sub_project_id: str
    name: str
    description: Optional[str] = None
    file_type: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    size_bytes: Optional[int] = None
    content: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProjectFileListResponse(BaseModel):
    files: List[ProjectFileSummary]


class ProjectFileEnvelope(BaseModel):
    file: ProjectFileResponse


class ProjectFileCreatedResponse(BaseModel):
    success: bool = True
    fileId: str
    message: str = "File created successfully"


class ProjectFileMutationResponse(BaseModel):
    success: bool = True
    file: ProjectFileResponse

import logging
import uuid
from datetime import datetime, timezone
from supabase import Client
from app.modules.projects.models import DEFAULT_COLOR, DEFAULT_FILE_TYPE, DEFAULT_ICON, FILE_SUMMARY_COLUMNS
from app.modules.projects.schemas import (
    ProjectCreate, ProjectUpdate, ProjectResponse, ProjectWithCountsResponse,
    ProjectDetailResponse, SubProjectCreate, SubProjectResponse, SubProjectWithFilesResponse,
    ProjectFileCreate, ProjectFileUpdate, ProjectFileResponse, ProjectFileSummary
)
from app.core.validation import clean_name
from typing import Any, Dict, List
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class ProjectService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_owned_project(self, project_id: str, user_id: str) -> Dict[str, Any]:
        result = self.supabase.table("projects")\
            .select("*")\
            .eq("id", project_id)\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Project not found")
        return result.data[0]

    def _get_owned_sub_project(self, sub_project_id: str, user_id: str) -> Dict[str, Any]:
        sub_result = self.supabase.table("sub_projects")\
            .select("*")\
            .eq("id", sub_project_id)\
            .limit(1)\
            .execute()
        if not sub_result.data:
            raise HTTPException(status_code=404, detail="Sub-project not found")

        owner_result = self.supabase.table("projects")\
            .select("id")\
            .eq("id", sub_result.data[0]["project_id"])\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        # Someone else's sub-project looks the same as a missing one
        if not owner_result.data:
            raise HTTPException(status_code=404, detail="Sub-project not found")
        return sub_result.data[0]

    def _get_owned_file(self, file_id: str, user_id: str) -> Dict[str, Any]:
        result = self.supabase.table("project_files")\
            .select("*")\
            .eq("id", file_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="File not found")
        try:
            self._get_owned_sub_project(result.data[0]["sub_project_id"], user_id)
        except HTTPException as e:
            if e.status_code == 404:
                raise HTTPException(status_code=404, detail="File not found")
            raise
        return result.data[0]

    def _delete_sub_project_rows(self, sub_project_ids: List[str]) -> None:
        """Delete files first, then the sub-projects themselves."""
        if not sub_project_ids:
            return
        self.supabase.table("project_files")\
            .delete()\
            .in_("sub_project_id", sub_project_ids)\
            .execute()
        self.supabase.table("sub_projects")\
            .delete()\
            .in_("id", sub_project_ids)\
            .execute()

    def _delete_project_rows(self, project_ids: List[str]) -> None:
        if not project_ids:
            return
        sub_result = self.supabase.table("sub_projects")\
            .select("id")\
            .in_("project_id", project_ids)\
            .execute()
        self._delete_sub_project_rows([sp["id"] for sp in sub_result.data or []])
        self.supabase.table("projects")\
            .delete()\
            .in_("id", project_ids)\
            .execute()

    def list_projects(self, user_id: str) -> List[ProjectWithCountsResponse]:
        """Caller's projects with sub-project and file counts"""
        try:
            result = self.supabase.table("projects")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("sort_order")\
                .order("created_at", desc=True)\
                .execute()
            projects = result.data or []
            if not projects:
                return []

            project_ids = [p["id"] for p in projects]
            sub_result = self.supabase.table("sub_projects")\
                .select("id, project_id")\
                .in_("project_id", project_ids)\
                .execute()
            sub_projects = sub_result.data or []

            files_per_sub: Dict[str, int] = {}
            if sub_projects:
                files_result = self.supabase.table("project_files")\
                    .select("id, sub_project_id")\
                    .in_("sub_project_id", [sp["id"] for sp in sub_projects])\
                    .execute()
                for f in files_result.data or []:
                    files_per_sub[f["sub_project_id"]] = files_per_sub.get(f["sub_project_id"], 0) + 1

            counts: Dict[str, List[int]] = {pid: [0, 0] for pid in project_ids}
            for sp in sub_projects:
                counts[sp["project_id"]][0] += 1
                counts[sp["project_id"]][1] += files_per_sub.get(sp["id"], 0)

            return [
                ProjectWithCountsResponse(
                    **p,
                    sub_projects_count=counts[p["id"]][0],
                    total_files_count=counts[p["id"]][1]
                )
                for p in projects
            ]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching projects: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch projects")

    def create_project(self, user_id: str, project_data: ProjectCreate) -> ProjectResponse:
        name = clean_name(project_data.name)
        if not name:
            raise HTTPException(status_code=400, detail="Project name is required")
        try:
            result = self.supabase.table("projects").insert({
                "user_id": user_id,
                "name": name,
                "description": project_data.description or None,
                "icon": project_data.icon or DEFAULT_ICON,
                "color": project_data.color or DEFAULT_COLOR
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create project")

            return ProjectResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating project: {e}")
            raise HTTPException(status_code=500, detail="Failed to create project")

    def get_project_detail(self, project_id: str, user_id: str) -> ProjectDetailResponse:
        """Project with its sub-projects, each carrying its files"""
        try:
            project = self._get_owned_project(project_id, user_id)

            sub_result = self.supabase.table("sub_projects")\
                .select("*")\
                .eq("project_id", project_id)\
                .order("sort_order")\
                .order("name")\
                .execute()
            sub_projects = sub_result.data or []

            files_by_sub: Dict[str, List[dict]] = {sp["id"]: [] for sp in sub_projects}
            if sub_projects:
                files_result = self.supabase.table("project_files")\
                    .select(FILE_SUMMARY_COLUMNS)\
                    .in_("sub_project_id", list(files_by_sub.keys()))\
                    .order("name")\
                    .execute()
                for f in files_result.data or []:
                    files_by_sub[f["sub_project_id"]].append(f)

            return ProjectDetailResponse(
                project=ProjectResponse(**project),
                sub_projects=[
                    SubProjectWithFilesResponse(**sp, files=files_by_sub[sp["id"]])
                    for sp in sub_projects
                ]
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching project {project_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch project")

    def update_project(self, project_id: str, user_id: str, project_data: ProjectUpdate) -> ProjectResponse:
        provided = project_data.model_fields_set
        update_data: Dict[str, Any] = {}
        if "name" in provided:
            name = clean_name(project_data.name)
            if not name:
                raise HTTPException(status_code=400, detail="Project name cannot be empty")
            update_data["name"] = name
        for field in ("description", "icon", "color"):
            if field in provided:
                update_data[field] = getattr(project_data, field)

        try:
            self._get_owned_project(project_id, user_id)

            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")

            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table("projects")\
                .update(update_data)\
                .eq("id", project_id)\
                .eq("user_id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Project not found")

            return ProjectResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating project {project_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update project")

    def delete_project(self, project_id: str, user_id: str) -> bool:
        """Delete a project with all of its sub-projects and files"""
        try:
            self._get_owned_project(project_id, user_id)
            self._delete_project_rows([project_id])
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting project {project_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete project")

    def delete_all_for_user(self, user_id: str) -> int:
        """Remove every project tree owned by a user. Used when the user is deleted."""
        result = self.supabase.table("projects")\
            .select("id")\
            .eq("user_id", user_id)\
            .execute()
        project_ids = [p["id"] for p in result.data or []]
        self._delete_project_rows(project_ids)
        return len(project_ids)

    def list_sub_projects(self, project_id: str, user_id: str) -> List[SubProjectResponse]:
        try:
            self._get_owned_project(project_id, user_id)

            result = self.supabase.table("sub_projects")\
                .select("*")\
                .eq("project_id", project_id)\
                .order("sort_order")\
                .order("name")\
                .execute()

            return [SubProjectResponse(**sp) for sp in result.data or []]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching sub-projects of {project_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch sub-projects")

    def create_sub_project(self, project_id: str, user_id: str, sub_project_data: SubProjectCreate) -> SubProjectResponse:
        name = clean_name(sub_project_data.name)
        if not name:
            raise HTTPException(status_code=400, detail="Sub-project name is required")
        try:
            self._get_owned_project(project_id, user_id)

            result = self.supabase.table("sub_projects").insert({
                "project_id": project_id,
                "name": name,
                "description": sub_project_data.description or None,
                "icon": sub_project_data.icon or DEFAULT_ICON
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create sub-project")

            return SubProjectResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating sub-project in {project_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create sub-project")

    def delete_sub_project(self, sub_project_id: str, user_id: str) -> bool:
        """Delete a sub-project and its files; ownership is checked through the parent project"""
        try:
            self._get_owned_sub_project(sub_project_id, user_id)
            self._delete_sub_project_rows([sub_project_id])
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting sub-project {sub_project_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete sub-project")

    def list_files(self, sub_project_id: str, user_id: str) -> List[ProjectFileSummary]:
        try:
            self._get_owned_sub_project(sub_project_id, user_id)

            result = self.supabase.table("project_files")\
                .select(FILE_SUMMARY_COLUMNS)\
                .eq("sub_project_id", sub_project_id)\
                .order("name")\
                .execute()

            return [ProjectFileSummary(**f) for f in result.data or []]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching files of sub-project {sub_project_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch files")

    def create_file(self, sub_project_id: str, user_id: str, file_data: ProjectFileCreate) -> ProjectFileResponse:
        """Store a text file in an owned sub-project; size is the UTF-8 length of content"""
        name = clean_name(file_data.name)
        if not name:
            raise HTTPException(status_code=400, detail="File name is required")
        if file_data.content is None:
            raise HTTPException(status_code=400, detail="File content is required")
        try:
            self._get_owned_sub_project(sub_project_id, user_id)

            file_id = str(uuid.uuid4())
            result = self.supabase.table("project_files").insert({
                "id": file_id,
                "sub_project_id": sub_project_id,
                "name": name,
                "description": file_data.description or None,
                "file_type": file_data.fileType or DEFAULT_FILE_TYPE,
                "category": file_data.category or None,
                "sub_category": file_data.subCategory or None,
                "content": file_data.content,
                "size_bytes": len(file_data.content.encode("utf-8")),
                "supabase_storage_path": file_id
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create file")

            logger.info(f"Created file {file_id} in sub-project {sub_project_id}")
            return ProjectFileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating file in sub-project {sub_project_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create file")

    def get_file(self, file_id: str, user_id: str) -> ProjectFileResponse:
        try:
            return ProjectFileResponse(**self._get_owned_file(file_id, user_id))
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching file {file_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch file")

    def update_file(self, file_id: str, user_id: str, file_data: ProjectFileUpdate) -> ProjectFileResponse:
        """Replace a file's content"""
        if file_data.content is None:
            raise HTTPException(status_code=400, detail="File content is required")
        try:
            self._get_owned_file(file_id, user_id)

            result = self.supabase.table("project_files")\
                .update({
                    "content": file_data.content,
                    "size_bytes": len(file_data.content.encode("utf-8")),
                    "updated_at": datetime.now(timezone.utc).isoformat()
                })\
                .eq("id", file_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="File not found")

            return ProjectFileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating file {file_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update file")

    def delete_file(self, file_id: str, user_id: str) -> bool:
        try:
            self._get_owned_file(file_id, user_id)
            self.supabase.table("project_files")\
                .delete()\
                .eq("id", file_id)\
                .execute()
            return True
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting file {file_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete file")

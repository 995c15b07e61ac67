import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from ..domain.models import Project
from ..services.project_service import ProjectService
from .dependencies import get_current_user, get_project_service
from .schemas import (
    ActionResultSchema,
    ProjectCreateSchema,
    ProjectResponseSchema,
    ProjectUpdateSchema,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])


def _to_schema(project: Project) -> ProjectResponseSchema:
    return ProjectResponseSchema.model_validate(project.__dict__)


def _urls(urls) -> list[str] | None:
    return [str(url) for url in urls] if urls is not None else None


@router.post(
    "/",
    response_model=ActionResultSchema[ProjectResponseSchema],
    status_code=status.HTTP_201_CREATED,
)
async def create_project(
    project_data: ProjectCreateSchema,
    caller_id: str = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> ActionResultSchema[ProjectResponseSchema]:
    """Create a new project owned by the caller."""
    project = service.create_project(
        caller_id,
        project_title=project_data.project_title,
        internal_link_sources=_urls(project_data.internal_link_sources),
    )
    return ActionResultSchema(data=_to_schema(project))


@router.get("/", response_model=ActionResultSchema[list[ProjectResponseSchema]])
async def list_projects(
    caller_id: str = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> ActionResultSchema[list[ProjectResponseSchema]]:
    """List the caller's projects, newest first."""
    projects = service.list_projects(caller_id)
    return ActionResultSchema(data=[_to_schema(p) for p in projects])


@router.get("/{project_id}", response_model=ActionResultSchema[ProjectResponseSchema])
async def get_project(
    project_id: UUID,
    caller_id: str = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> ActionResultSchema[ProjectResponseSchema]:
    """Get project by ID."""
    project = service.get_project(caller_id, str(project_id))
    return ActionResultSchema(data=_to_schema(project))


@router.patch(
    "/{project_id}", response_model=ActionResultSchema[ProjectResponseSchema]
)
async def update_project(
    project_id: UUID,
    update_data: ProjectUpdateSchema,
    caller_id: str = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> ActionResultSchema[ProjectResponseSchema]:
    """Update project title and/or link sources."""
    project = service.update_project(
        caller_id,
        str(project_id),
        project_title=update_data.project_title,
        internal_link_sources=_urls(update_data.internal_link_sources),
    )
    return ActionResultSchema(data=_to_schema(project))


@router.delete("/{project_id}", response_model=ActionResultSchema[None])
async def delete_project(
    project_id: UUID,
    caller_id: str = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> ActionResultSchema[None]:
    """Delete project along with its videos."""
    service.delete_project(caller_id, str(project_id))
    return ActionResultSchema()

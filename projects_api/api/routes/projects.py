"""Projects — CRUD endpoints over the TestProjects table.

Invariants:
    - GET / lists rows ordered by id; a missing table lists as []
    - GET/PUT/DELETE on an unknown id (or missing table) → 404
    - Ids outside the int4 range of "Id" → 400, never a database round trip
    - POST → 201 with Location pointing at GET /{id}; missing table → 503
    - Any other failure is left to propagate to the error Guard

Design Decisions:
    - Mounted with the configured api_prefix in create_app(), after diagnostics, so
      the literal /debug-env path is matched before /{project_id}
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from projects_api.core.errors import ResourceNotFoundError
from projects_api.infrastructure.database import get_db
from projects_api.schemas.project import ProjectResponse, ProjectWrite
from projects_api.services.project_repository import ProjectRepository

router = APIRouter(tags=["projects"])

RESOURCE = "TestProject"

# "Id" is int4: out-of-range ids are rejected as 400 before reaching the driver
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
ProjectId = Annotated[int, Path(ge=INT32_MIN, le=INT32_MAX)]


@router.get("", response_model=list[ProjectResponse])
@router.get("/", response_model=list[ProjectResponse], include_in_schema=False)
async def list_projects(db: AsyncSession = Depends(get_db)):
    """List all projects ordered by id."""
    projects = await ProjectRepository(db).list_all()
    return [ProjectResponse.model_validate(p) for p in projects]


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: ProjectId, db: AsyncSession = Depends(get_db)):
    project = await ProjectRepository(db).get(project_id)
    if project is None:
        raise ResourceNotFoundError(RESOURCE, project_id)
    return ProjectResponse.model_validate(project)


@router.post(
    "", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED,
)
@router.post(
    "/", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
async def create_project(
    body: ProjectWrite,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Create a project; Location points at the new row."""
    project = await ProjectRepository(db).create(body.name)
    response.headers["Location"] = str(
        request.app.url_path_for("get_project", project_id=str(project.id)),
    )
    return ProjectResponse.model_validate(project)


@router.put("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_project(
    project_id: ProjectId, body: ProjectWrite, db: AsyncSession = Depends(get_db),
):
    if not await ProjectRepository(db).update(project_id, body.name):
        raise ResourceNotFoundError(RESOURCE, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: ProjectId, db: AsyncSession = Depends(get_db)):
    if not await ProjectRepository(db).delete(project_id):
        raise ResourceNotFoundError(RESOURCE, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

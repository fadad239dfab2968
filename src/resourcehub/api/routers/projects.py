"""
Router for Project management endpoints.
"""

from typing import Annotated, List, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from resourcehub.api import schemas
from resourcehub.api.dependencies import get_db, get_project_repository
from resourcehub.platform.logging import get_logger
from resourcehub.storage.models import ProjectModel
from resourcehub.storage.repositories import ProjectRepository

logger = get_logger(__name__)

router = APIRouter()

@router.post("/", response_model=schemas.ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    data: schemas.ProjectCreate,
    repo: Annotated[ProjectRepository, Depends(get_project_repository)],
    session: Annotated[Session, Depends(get_db)],
):
    """
    Create a new Project.
    """
    project = repo.create(session, ProjectModel(id=str(uuid4()), **data.model_dump()))
    logger.info("Project created", project_id=project.id, name=project.name)
    return project

@router.get("/", response_model=List[schemas.ProjectResponse])
async def list_projects(
    repo: Annotated[ProjectRepository, Depends(get_project_repository)],
    session: Annotated[Session, Depends(get_db)],
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    return repo.list(session, limit=limit, offset=offset, status=status_filter)

@router.get("/{project_id}", response_model=schemas.ProjectResponse)
async def get_project(
    project_id: str,
    repo: Annotated[ProjectRepository, Depends(get_project_repository)],
    session: Annotated[Session, Depends(get_db)],
):
    project = repo.get(session, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project

@router.patch("/{project_id}", response_model=schemas.ProjectResponse)
async def update_project(
    project_id: str,
    updates: schemas.ProjectUpdate,
    repo: Annotated[ProjectRepository, Depends(get_project_repository)],
    session: Annotated[Session, Depends(get_db)],
):
    update_data = updates.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")

    project = repo.get(session, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    start = update_data.get("start_date", project.start_date)
    end = update_data.get("end_date", project.end_date)
    if start and end and end < start:
        raise HTTPException(status_code=422, detail="end_date must be on or after start_date")

    return repo.update(session, project_id, update_data)

@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: str,
    repo: Annotated[ProjectRepository, Depends(get_project_repository)],
    session: Annotated[Session, Depends(get_db)],
):
    """
    Cancel a Project (soft delete).
    """
    if not repo.delete(session, project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    return None

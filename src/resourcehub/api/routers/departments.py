"""
Router for Department management endpoints.
"""

from typing import Annotated, List
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from resourcehub.api import schemas
from resourcehub.api.dependencies import get_db, get_department_repository
from resourcehub.platform.logging import get_logger
from resourcehub.storage.models import DepartmentModel
from resourcehub.storage.repositories import DepartmentRepository

logger = get_logger(__name__)

router = APIRouter()

@router.post("/", response_model=schemas.DepartmentResponse, status_code=status.HTTP_201_CREATED)
async def create_department(
    data: schemas.DepartmentCreate,
    repo: Annotated[DepartmentRepository, Depends(get_department_repository)],
    session: Annotated[Session, Depends(get_db)],
):
    """
    Create a new Department.
    """
    if repo.get_by_name(session, data.name):
        raise HTTPException(status_code=409, detail="Department name already exists")

    department = repo.create(session, DepartmentModel(id=str(uuid4()), **data.model_dump()))
    logger.info("Department created", department_id=department.id, name=department.name)
    return department

@router.get("/", response_model=List[schemas.DepartmentResponse])
async def list_departments(
    repo: Annotated[DepartmentRepository, Depends(get_department_repository)],
    session: Annotated[Session, Depends(get_db)],
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    return repo.list(session, limit=limit, offset=offset)

@router.get("/{department_id}", response_model=schemas.DepartmentResponse)
async def get_department(
    department_id: str,
    repo: Annotated[DepartmentRepository, Depends(get_department_repository)],
    session: Annotated[Session, Depends(get_db)],
):
    department = repo.get(session, department_id)
    if not department:
        raise HTTPException(status_code=404, detail="Department not found")
    return department

@router.patch("/{department_id}", response_model=schemas.DepartmentResponse)
async def update_department(
    department_id: str,
    updates: schemas.DepartmentUpdate,
    repo: Annotated[DepartmentRepository, Depends(get_department_repository)],
    session: Annotated[Session, Depends(get_db)],
):
    update_data = updates.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")

    name = update_data.get("name")
    if name:
        existing = repo.get_by_name(session, name)
        if existing and existing.id != department_id:
            raise HTTPException(status_code=409, detail="Department name already exists")

    department = repo.update(session, department_id, update_data)
    if not department:
        raise HTTPException(status_code=404, detail="Department not found")
    return department

@router.delete("/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_department(
    department_id: str,
    repo: Annotated[DepartmentRepository, Depends(get_department_repository)],
    session: Annotated[Session, Depends(get_db)],
):
    """
    Delete a Department. Its employees are kept without a department.
    """
    if not repo.delete(session, department_id):
        raise HTTPException(status_code=404, detail="Department not found")
    return None

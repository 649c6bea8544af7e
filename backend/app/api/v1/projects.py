from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db, get_page_params
from app.schemas.auth import AuthContext, MessageResponse
from app.schemas.common import Page, PageParams
from app.schemas.project import (
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    ResourceAllocationCreate,
    ResourceAllocationResponse,
    ResourceAllocationUpdate,
)
from app.services.customers import project_service

router = APIRouter()


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    payload: ProjectCreate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await project_service.create_project(db, payload, caller)


@router.get("", response_model=Page[ProjectResponse])
async def list_projects(
    params: PageParams = Depends(get_page_params),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await project_service.list_projects(db, params)


@router.get("/allocations", response_model=List[ResourceAllocationResponse])
async def list_allocations(
    project_id: Optional[str] = Query(None),
    employee_id: Optional[str] = Query(None),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await project_service.list_allocations(db, caller, project_id=project_id, employee_id=employee_id)


@router.post("/allocations", response_model=ResourceAllocationResponse, status_code=201)
async def create_allocation(
    payload: ResourceAllocationCreate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await project_service.create_allocation(db, payload, caller)


@router.patch("/allocations/{allocation_id}", response_model=ResourceAllocationResponse)
async def update_allocation(
    allocation_id: str,
    payload: ResourceAllocationUpdate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await project_service.update_allocation(db, allocation_id, payload, caller)


@router.delete("/allocations/{allocation_id}", response_model=MessageResponse)
async def delete_allocation(
    allocation_id: str,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await project_service.delete_allocation(db, allocation_id, caller)
    return MessageResponse(message="Resource allocation deleted successfully.")


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await project_service.get_project(db, project_id)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    payload: ProjectUpdate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await project_service.update_project(db, project_id, payload, caller)


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: str,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await project_service.delete_project(db, project_id, caller)
    return MessageResponse(message="Project deleted successfully.")

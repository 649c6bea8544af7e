from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db, get_page_params
from app.schemas.auth import AuthContext, MessageResponse
from app.schemas.common import Page, PageParams
from app.schemas.employee import (
    ApproverSearchResult,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeSummary,
    EmployeeUpdate,
)
from app.services.employees import employee_service

router = APIRouter()


@router.post("", response_model=EmployeeResponse, status_code=201)
async def create_employee(
    payload: EmployeeCreate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await employee_service.create_employee(db, payload, caller)


@router.get("", response_model=Page[EmployeeSummary])
async def list_employees(
    params: PageParams = Depends(get_page_params),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await employee_service.list_employees(db, caller, params)


@router.get("/search", response_model=List[EmployeeSummary])
async def search_employees(
    keyword: str = Query(..., min_length=1),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await employee_service.search_employees(db, keyword, caller)


@router.get("/approvers/search", response_model=List[ApproverSearchResult])
async def search_leave_approvers(
    keyword: str = Query(..., min_length=1),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Managers, directors and HR who can be picked as a secondary leave approver."""
    return await employee_service.search_leave_approvers(db, keyword)


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: str,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await employee_service.get_employee(db, employee_id, caller)


@router.patch("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: str,
    payload: EmployeeUpdate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await employee_service.update_employee(db, employee_id, payload, caller)


@router.delete("/{employee_id}", response_model=MessageResponse)
async def delete_employee(
    employee_id: str,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await employee_service.delete_employee(db, employee_id, caller)
    return MessageResponse(message="Employee deleted successfully.")

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db, get_page_params
from app.schemas.auth import AuthContext
from app.schemas.common import Page, PageParams
from app.schemas.leave import (
    LeaveAllocationResponse,
    LeaveAllocationUpdate,
    LeaveApplyRequest,
    LeaveBalance,
    LeaveResponse,
    LeaveStatusUpdate,
)
from app.services.leaves import leave_service

router = APIRouter()


@router.post("", status_code=201)
async def apply_leave(
    payload: LeaveApplyRequest,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await leave_service.apply_leave(db, payload, caller)


@router.get("/reportees", response_model=Page[LeaveResponse])
async def list_reportee_leaves(
    params: PageParams = Depends(get_page_params),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await leave_service.list_reportee_leaves(db, caller, params)


@router.get("/employee/{employee_id}", response_model=Page[LeaveResponse])
async def list_employee_leaves(
    employee_id: str,
    params: PageParams = Depends(get_page_params),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await leave_service.list_employee_leaves(db, employee_id, caller, params)


@router.get("/employee/{employee_id}/balance", response_model=List[LeaveBalance])
async def get_leave_balance(
    employee_id: str,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await leave_service.get_leave_balance(db, employee_id, caller, year)


@router.get("/employee/{employee_id}/allocations", response_model=List[LeaveAllocationResponse])
async def get_leave_allocations(
    employee_id: str,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await leave_service.get_leave_allocations(db, employee_id, caller, year)


@router.put("/employee/{employee_id}/allocations")
async def update_leave_allocations(
    employee_id: str,
    payload: LeaveAllocationUpdate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await leave_service.update_leave_allocations(db, employee_id, payload, caller)


@router.post("/allocations/yearly")
async def allocate_yearly_leaves(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create the year's allocations for every employee, carrying forward CL/PL balances."""
    return await leave_service.allocate_yearly_leaves(db, caller, year)


@router.patch("/{leave_id}/status")
async def update_leave_status(
    leave_id: str,
    payload: LeaveStatusUpdate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await leave_service.update_leave_status(db, leave_id, payload, caller)

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db, get_page_params
from app.schemas.auth import AuthContext, MessageResponse
from app.schemas.common import Page, PageParams
from app.schemas.timesheet import (
    BulkTimesheetApproval,
    DailyTimesheetCreate,
    DailyTimesheetResponse,
    DailyTimesheetUpdate,
    NextTaskIdResponse,
    TimesheetApproval,
    WeeklyTimesheetCreate,
    WeeklyTimesheetResponse,
)
from app.services.timesheets import daily_service, weekly_service

router = APIRouter()


@router.post("/daily", status_code=201)
async def create_daily_timesheet(
    payload: DailyTimesheetCreate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await daily_service.create_daily_timesheet(db, payload, caller)


@router.get("/daily", response_model=Page[DailyTimesheetResponse])
async def list_daily_timesheets(
    employee_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None, pattern="^(REQUESTED|APPROVED|REJECTED)$"),
    params: PageParams = Depends(get_page_params),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await daily_service.list_daily_timesheets(db, caller, params, employee_id=employee_id, status=status)


@router.get("/daily/reportees", response_model=Page[DailyTimesheetResponse])
async def list_reportee_daily_timesheets(
    status: Optional[str] = Query(None, pattern="^(REQUESTED|APPROVED|REJECTED)$"),
    params: PageParams = Depends(get_page_params),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await daily_service.list_reportee_daily_timesheets(db, caller, params, status)


@router.get("/daily/next-task-id/{employee_id}", response_model=NextTaskIdResponse)
async def get_next_task_id(
    employee_id: str,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await daily_service.get_next_task_id(db, employee_id, caller)


@router.post("/daily/bulk-approval")
async def bulk_approve_daily_timesheets(
    payload: BulkTimesheetApproval,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await daily_service.bulk_approve_daily_timesheets(db, payload, caller)


@router.put("/daily/{timesheet_id}")
async def update_daily_timesheet(
    timesheet_id: str,
    payload: DailyTimesheetUpdate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await daily_service.update_daily_timesheet(db, timesheet_id, payload, caller)


@router.patch("/daily/{timesheet_id}/approval", response_model=MessageResponse)
async def update_daily_approval(
    timesheet_id: str,
    payload: TimesheetApproval,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await daily_service.update_daily_approval(db, timesheet_id, payload, caller)
    return MessageResponse(message=f"Timesheet {payload.approval_status.lower()} successfully.")


@router.post("/weekly", status_code=201)
async def create_weekly_timesheet(
    payload: WeeklyTimesheetCreate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await weekly_service.create_weekly_timesheet(db, payload, caller)


@router.get("/weekly", response_model=Page[WeeklyTimesheetResponse])
async def list_weekly_timesheets(
    params: PageParams = Depends(get_page_params),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await weekly_service.list_weekly_timesheets(db, caller, params)


@router.get("/weekly/reportees", response_model=Page[WeeklyTimesheetResponse])
async def list_reportee_weekly_timesheets(
    params: PageParams = Depends(get_page_params),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await weekly_service.list_reportee_weekly_timesheets(db, caller, params)


@router.get("/weekly/{timesheet_id}", response_model=WeeklyTimesheetResponse)
async def get_weekly_timesheet(
    timesheet_id: str,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await weekly_service.get_weekly_timesheet_detail(db, timesheet_id, caller)


@router.patch("/weekly/{timesheet_id}/approval")
async def approve_weekly_timesheet(
    timesheet_id: str,
    payload: TimesheetApproval,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await weekly_service.approve_weekly_timesheet(db, timesheet_id, payload, caller)

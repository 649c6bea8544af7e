"""
Weekly timesheets: one row per employee per Monday-to-Sunday week.

A weekly timesheet is SAVED while the employee is still editing it and
REQUESTED once submitted; submission locks every task row and rejection
unlocks them again.
"""

import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import BadRequestError, ForbiddenError, InternalServerError
from app.core.roles import (
    APPROVER_ROLES,
    ApprovalStatus,
    FINAL_APPROVAL_STATUSES,
    Role,
    TimesheetWorkflowStatus,
    has_role,
)
from app.models.timesheet import EmployeeWeeklyTimesheet
from app.schemas.auth import AuthContext
from app.schemas.common import Page, PageParams
from app.schemas.timesheet import TimesheetApproval, WeeklyTimesheetCreate, WeeklyTimesheetResponse
from app.services.access import can_view_employee, reportee_ids
from app.services.notifications import email_templates, get_email_service
from app.services.timesheets.helpers import (
    decimal_to_hours,
    format_hours_readable,
    format_long_date,
    generate_request_number,
    generate_task_id,
)
from app.stores import employee_store, timesheet_store

logger = logging.getLogger("vodichron.timesheets.weekly")

ACCESS_DENIED = "Access denied for the operation request."
SUBMIT_FAILED = "Problem submitting your timesheet at the moment, please try again after some time."


def _with_row_ids(rows: List[Dict[str, Any]], locked: bool) -> List[Dict[str, Any]]:
    prepared = []
    for row in rows:
        row = dict(row)
        row.setdefault("uuid", str(uuid.uuid4()))
        row["is_locked"] = locked
        prepared.append(row)
    return prepared


def unlock_task_rows(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Clear is_locked on every row and on every per-day cell that carries the flag."""
    unlocked = []
    for row in rows or []:
        row = dict(row)
        for key, cell in row.items():
            if isinstance(cell, dict) and "is_locked" in cell:
                row[key] = {**cell, "is_locked": False}
        row["is_locked"] = False
        unlocked.append(row)
    return unlocked


def _already_submitted(week_start: date) -> BadRequestError:
    return BadRequestError(f"Timesheet is already submitted for the week starting with {format_long_date(week_start)}.")


async def create_weekly_timesheet(db: AsyncSession, data: WeeklyTimesheetCreate, caller: AuthContext) -> dict:
    if caller.uuid != data.employee_id:
        logger.warning(f"{caller.uuid} tried to create a weekly timesheet for {data.employee_id}")
        raise ForbiddenError(ACCESS_DENIED)

    employee = await employee_store.get_employee(db, data.employee_id)
    if employee is None:
        raise BadRequestError("Unable to find the details of the employee to update.")

    if data.week_end_date < data.week_start_date:
        raise BadRequestError("Invalid week dates. Please use YYYY-MM-DD format.")

    if await timesheet_store.find_weekly_by_start(db, data.employee_id, data.week_start_date):
        raise _already_submitted(data.week_start_date)

    submitted = data.time_sheet_status == TimesheetWorkflowStatus.REQUESTED.value
    request_number = generate_request_number()
    try:
        task_id = generate_task_id(await timesheet_store.get_max_task_number(db, data.employee_id))
        timesheet = await timesheet_store.create_weekly_timesheet(db, {
            "employee_id": data.employee_id,
            "request_number": request_number,
            "week_start_date": data.week_start_date,
            "week_end_date": data.week_end_date,
            "task_details": _with_row_ids([row.model_dump() for row in data.task_details], locked=submitted),
            "total_hours": data.total_hours,
            "task_id": task_id,
            "approval_status": ApprovalStatus.REQUESTED.value,
            "time_sheet_status": data.time_sheet_status,
            "created_by": caller.uuid,
            "updated_by": caller.uuid,
        })
    except IntegrityError:
        await db.rollback()
        raise _already_submitted(data.week_start_date)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to create weekly timesheet for {data.employee_id}: {e}", exc_info=True)
        raise InternalServerError(SUBMIT_FAILED)

    logger.info(f"Weekly timesheet {timesheet.uuid} #{request_number} created for {data.employee_id} ({data.time_sheet_status})")
    if submitted:
        await _notify_submission(db, employee, timesheet)
    return {"timesheet_uuid": timesheet.uuid, "request_number": str(request_number)}


async def _notify_submission(db: AsyncSession, employee, timesheet: EmployeeWeeklyTimesheet) -> None:
    email_service = get_email_service()
    week_start = timesheet.week_start_date.isoformat()
    week_end = timesheet.week_end_date.isoformat()
    total_hours = format_hours_readable(decimal_to_hours(timesheet.total_hours))
    supervisor_ids = [i for i in (employee.reporting_manager_id, employee.reporting_director_id) if i]
    for supervisor in await employee_store.get_employees(db, supervisor_ids):
        if not supervisor.official_email:
            continue
        subject, html = email_templates.timesheet_submitted_manager_email(
            supervisor.name, employee.name, timesheet.request_number, week_start, week_end,
            total_hours, settings.FRONTEND_URL,
        )
        await email_service.send_email(supervisor.official_email, subject, html)

    if employee.official_email:
        subject, html = email_templates.timesheet_submitted_employee_email(
            employee.name, timesheet.request_number, week_start, week_end,
            total_hours, settings.FRONTEND_URL,
        )
        await email_service.send_email(employee.official_email, subject, html)


async def approve_weekly_timesheet(
    db: AsyncSession, timesheet_id: str, approval: TimesheetApproval, caller: AuthContext
) -> dict:
    if not has_role(caller.role, APPROVER_ROLES):
        logger.warning(f"{caller.uuid} ({caller.role}) is not allowed to approve weekly timesheets")
        raise ForbiddenError(ACCESS_DENIED)
    if approval.approval_status not in FINAL_APPROVAL_STATUSES:
        raise BadRequestError('Invalid approval status. Must be either "APPROVED" or "REJECTED".')

    timesheet = await timesheet_store.get_weekly_timesheet(db, timesheet_id)
    if timesheet is None:
        raise BadRequestError("Unable to get timesheet data.")

    if caller.role != Role.SUPER_USER.value and timesheet.approval_status in FINAL_APPROVAL_STATUSES:
        raise BadRequestError(
            f"Timesheet is {timesheet.approval_status} already and it cannot be updated again."
        )

    task_details = timesheet.task_details
    if approval.approval_status == ApprovalStatus.REJECTED.value:
        task_details = unlock_task_rows(task_details)

    await timesheet_store.update_weekly_timesheet(db, timesheet_id, {
        "approval_status": approval.approval_status,
        "time_sheet_status": approval.approval_status,
        "approver_id": caller.uuid,
        "approver_role": caller.role,
        "approval_date": date.today(),
        "approver_comments": approval.comment,
        "task_details": task_details,
        "updated_by": caller.uuid,
    })
    logger.info(f"Weekly timesheet {timesheet_id} {approval.approval_status} by {caller.uuid}")

    employee = await employee_store.get_employee(db, timesheet.employee_id)
    if employee is not None and employee.official_email:
        builder = (
            email_templates.timesheet_approved_email
            if approval.approval_status == ApprovalStatus.APPROVED.value
            else email_templates.timesheet_rejected_email
        )
        subject, html = builder(
            employee.name,
            timesheet.request_number,
            f"{timesheet.week_start_date.strftime('%m/%d/%Y')} - {timesheet.week_end_date.strftime('%m/%d/%Y')}",
            format_hours_readable(decimal_to_hours(timesheet.total_hours)),
            caller.name or caller.email or caller.uuid,
            approval.comment,
            settings.FRONTEND_URL,
        )
        await get_email_service().send_email(employee.official_email, subject, html)

    return {"success": True}


def _to_response(timesheet: EmployeeWeeklyTimesheet, employee_name: Optional[str] = None) -> WeeklyTimesheetResponse:
    response = WeeklyTimesheetResponse.model_validate(timesheet)
    response.employee_name = employee_name
    return response


async def list_weekly_timesheets(
    db: AsyncSession, caller: AuthContext, params: PageParams
) -> Page[WeeklyTimesheetResponse]:
    rows, total = await timesheet_store.list_weekly_timesheets(db, [caller.uuid], params.offset, params.page_size)
    return Page[WeeklyTimesheetResponse](
        items=[_to_response(ts, name) for ts, name in rows],
        page=params.page,
        page_size=params.page_size,
        total=total,
    )


async def list_reportee_weekly_timesheets(
    db: AsyncSession, caller: AuthContext, params: PageParams
) -> Page[WeeklyTimesheetResponse]:
    if not has_role(caller.role, APPROVER_ROLES):
        raise ForbiddenError(ACCESS_DENIED)
    scope = await reportee_ids(db, caller)
    rows, total = await timesheet_store.list_weekly_timesheets(db, scope, params.offset, params.page_size)
    return Page[WeeklyTimesheetResponse](
        items=[_to_response(ts, name) for ts, name in rows],
        page=params.page,
        page_size=params.page_size,
        total=total,
    )


async def get_weekly_timesheet_detail(
    db: AsyncSession, timesheet_id: str, caller: AuthContext
) -> WeeklyTimesheetResponse:
    timesheet = await timesheet_store.get_weekly_timesheet(db, timesheet_id)
    if timesheet is None:
        raise BadRequestError("Unable to get timesheet data.")
    if not await can_view_employee(db, caller, timesheet.employee_id):
        raise ForbiddenError(ACCESS_DENIED)
    employee = await employee_store.get_employee(db, timesheet.employee_id)
    return _to_response(timesheet, employee.name if employee else None)

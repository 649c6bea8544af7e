"""
Daily timesheets: submission, listing, single and bulk approval.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import BadRequestError, ForbiddenError, InternalServerError, NotFoundError
from app.core.roles import ADMIN_ROLES, APPROVER_ROLES, ApprovalStatus, FINAL_APPROVAL_STATUSES, has_role
from app.models.timesheet import EmployeeTimesheet
from app.schemas.auth import AuthContext
from app.schemas.common import Page, PageParams
from app.schemas.timesheet import (
    BulkTimesheetApproval,
    DailyTimesheetCreate,
    DailyTimesheetResponse,
    DailyTimesheetUpdate,
    NextTaskIdResponse,
    TimesheetApproval,
)
from app.services.access import reportee_ids
from app.services.notifications import email_templates, get_email_service
from app.services.timesheets.helpers import (
    decimal_to_hours,
    format_hours_readable,
    format_long_date,
    format_task_number,
    generate_request_number,
    generate_task_id,
    parse_date,
)
from app.stores import employee_store, timesheet_store

logger = logging.getLogger("vodichron.timesheets.daily")

ACCESS_DENIED = "Access denied for the operation request."
SUBMIT_FAILED = "Problem submitting your timesheet at the moment, please try again after some time."
INVALID_STATUS = 'Invalid approval status. Must be either "APPROVED" or "REJECTED".'


def _already_submitted(timesheet_date: date) -> BadRequestError:
    return BadRequestError(f"Timesheet is already submitted for date, {format_long_date(timesheet_date)}.")


async def create_daily_timesheet(db: AsyncSession, data: DailyTimesheetCreate, caller: AuthContext) -> dict:
    if not has_role(caller.role, ADMIN_ROLES) and caller.uuid != data.employee_id:
        logger.warning(f"{caller.uuid} ({caller.role}) tried to submit a timesheet for {data.employee_id}")
        raise ForbiddenError("You can only submit timesheets for yourself.")

    timesheet_date = parse_date(data.timesheet_date)
    if timesheet_date is None:
        raise BadRequestError("Invalid timesheet date format. Please use YYYY-MM-DD.")

    if not data.task_details:
        raise BadRequestError("Task details is a required field. Please add at least one task.")

    if await timesheet_store.find_daily_by_date(db, data.employee_id, timesheet_date):
        raise _already_submitted(timesheet_date)

    try:
        task_id = generate_task_id(await timesheet_store.get_max_task_number(db, data.employee_id))
        timesheet = await timesheet_store.create_daily_timesheet(db, {
            "employee_id": data.employee_id,
            "request_number": generate_request_number(),
            "timesheet_date": timesheet_date,
            "task_details": [task.model_dump(exclude_none=True) for task in data.task_details],
            "total_hours": data.total_hours,
            "task_id": task_id,
            "approval_status": ApprovalStatus.REQUESTED.value,
            "created_by": caller.uuid,
            "updated_by": caller.uuid,
        })
    except IntegrityError:
        await db.rollback()
        raise _already_submitted(timesheet_date)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to create daily timesheet for {data.employee_id}: {e}", exc_info=True)
        raise InternalServerError(SUBMIT_FAILED)

    logger.info(f"Daily timesheet {timesheet.uuid} ({task_id}) submitted for {data.employee_id} on {timesheet_date}")
    return {"timesheet_uuid": timesheet.uuid, "request_number": timesheet.request_number, "task_id": task_id}


def _to_response(timesheet: EmployeeTimesheet, employee_name: Optional[str] = None) -> DailyTimesheetResponse:
    response = DailyTimesheetResponse.model_validate(timesheet)
    response.employee_name = employee_name
    return response


async def list_daily_timesheets(
    db: AsyncSession,
    caller: AuthContext,
    params: PageParams,
    employee_id: Optional[str] = None,
    status: Optional[str] = None,
) -> Page[DailyTimesheetResponse]:
    """
    Own timesheets when `employee_id` is the caller or omitted, otherwise the
    timesheets of employees the caller may review.
    """
    if employee_id is None or employee_id == caller.uuid:
        scope: Optional[List[str]] = [caller.uuid]
    else:
        visible = await reportee_ids(db, caller)
        if visible is not None and employee_id not in visible:
            raise ForbiddenError(ACCESS_DENIED)
        scope = [employee_id]

    rows, total = await timesheet_store.list_daily_timesheets(db, scope, params.offset, params.page_size, status)
    return Page[DailyTimesheetResponse](
        items=[_to_response(ts, name) for ts, name in rows],
        page=params.page,
        page_size=params.page_size,
        total=total,
    )


async def list_reportee_daily_timesheets(
    db: AsyncSession, caller: AuthContext, params: PageParams, status: Optional[str] = None
) -> Page[DailyTimesheetResponse]:
    if not has_role(caller.role, APPROVER_ROLES | ADMIN_ROLES):
        raise ForbiddenError(ACCESS_DENIED)
    scope = await reportee_ids(db, caller)
    rows, total = await timesheet_store.list_daily_timesheets(
        db, scope, params.offset, params.page_size, status, exclude_employee_id=caller.uuid
    )
    return Page[DailyTimesheetResponse](
        items=[_to_response(ts, name) for ts, name in rows],
        page=params.page,
        page_size=params.page_size,
        total=total,
    )


def _check_approver(caller: AuthContext, approval_status: str) -> None:
    if not has_role(caller.role, APPROVER_ROLES):
        logger.warning(f"{caller.uuid} ({caller.role}) is not allowed to approve timesheets")
        raise ForbiddenError(ACCESS_DENIED)
    if approval_status not in FINAL_APPROVAL_STATUSES:
        raise BadRequestError(INVALID_STATUS)


async def _notify_decision(
    db: AsyncSession, timesheet: EmployeeTimesheet, approval: TimesheetApproval, caller: AuthContext
) -> None:
    employee = await employee_store.get_employee(db, timesheet.employee_id)
    if employee is None or not employee.official_email:
        logger.info(f"No email on file for employee {timesheet.employee_id}, skipping notification")
        return

    builder = (
        email_templates.timesheet_approved_email
        if approval.approval_status == ApprovalStatus.APPROVED.value
        else email_templates.timesheet_rejected_email
    )
    subject, html = builder(
        employee.name,
        timesheet.request_number,
        timesheet.timesheet_date.strftime("%m/%d/%Y"),
        format_hours_readable(decimal_to_hours(timesheet.total_hours)),
        caller.name or caller.email or caller.uuid,
        approval.comment,
        settings.FRONTEND_URL,
    )
    await get_email_service().send_email(employee.official_email, subject, html)


async def update_daily_approval(
    db: AsyncSession,
    timesheet_id: str,
    approval: TimesheetApproval,
    caller: AuthContext,
    notify: bool = True,
) -> EmployeeTimesheet:
    _check_approver(caller, approval.approval_status)

    timesheet = await timesheet_store.get_daily_timesheet(db, timesheet_id)
    if timesheet is None:
        raise NotFoundError("Unable to get timesheet data.")

    try:
        await timesheet_store.update_daily_approval(
            db, timesheet_id, approval.approval_status, caller.uuid, approval.comment
        )
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to update approval of timesheet {timesheet_id}: {e}", exc_info=True)
        raise InternalServerError("Failed to update timesheet approval status. Please try again later.")

    logger.info(f"Daily timesheet {timesheet_id} {approval.approval_status} by {caller.uuid}")
    if notify:
        await _notify_decision(db, timesheet, approval, caller)
    return timesheet


async def bulk_approve_daily_timesheets(
    db: AsyncSession, payload: BulkTimesheetApproval, caller: AuthContext
) -> dict:
    """
    Apply one decision to many timesheets, then send one summary email per employee.

    Every id must exist; nothing is updated when any of them is unknown.
    """
    _check_approver(caller, payload.approval_status)

    timesheet_ids = list(dict.fromkeys(payload.timesheet_ids))
    timesheets = await timesheet_store.get_daily_timesheets(db, timesheet_ids)
    found = {ts.uuid for ts in timesheets}
    missing = [timesheet_id for timesheet_id in timesheet_ids if timesheet_id not in found]
    if missing:
        raise BadRequestError(f"Unable to get timesheet data for: {', '.join(missing)}.")

    approval = TimesheetApproval(approval_status=payload.approval_status, comment=payload.comment)
    by_employee: Dict[str, List[EmployeeTimesheet]] = defaultdict(list)
    updated = 0
    for timesheet in timesheets:
        try:
            updated += await timesheet_store.update_daily_approval(
                db, timesheet.uuid, approval.approval_status, caller.uuid, approval.comment
            )
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Bulk approval stopped at timesheet {timesheet.uuid}: {e}", exc_info=True)
            raise InternalServerError("Failed to update timesheet approval status. Please try again later.")
        by_employee[timesheet.employee_id].append(timesheet)

    for employee_id, employee_timesheets in by_employee.items():
        await _notify_bulk_decision(db, employee_id, employee_timesheets, approval, caller)

    logger.info(f"{caller.uuid} bulk {payload.approval_status} {updated} daily timesheets")
    return {"success": True, "approved_count": updated}


async def _notify_bulk_decision(
    db: AsyncSession,
    employee_id: str,
    timesheets: List[EmployeeTimesheet],
    approval: TimesheetApproval,
    caller: AuthContext,
) -> None:
    if len(timesheets) == 1:
        await _notify_decision(db, timesheets[0], approval, caller)
        return

    employee = await employee_store.get_employee(db, employee_id)
    if employee is None or not employee.official_email:
        return
    dates = sorted(ts.timesheet_date.strftime("%m/%d/%Y") for ts in timesheets)
    approver = caller.name or caller.email or caller.uuid
    today = date.today().strftime("%m/%d/%Y")
    if approval.approval_status == ApprovalStatus.APPROVED.value:
        subject, html = email_templates.timesheets_bulk_approved_email(
            employee.name, len(timesheets), today, approver, dates, settings.FRONTEND_URL
        )
    else:
        subject, html = email_templates.timesheets_bulk_rejected_email(
            employee.name, len(timesheets), today, approver, dates, approval.comment, settings.FRONTEND_URL
        )
    await get_email_service().send_email(employee.official_email, subject, html)


async def update_daily_timesheet(
    db: AsyncSession, timesheet_id: str, data: DailyTimesheetUpdate, caller: AuthContext
) -> dict:
    """
    Edit the tasks of a daily timesheet.

    Employees may edit their own entry on the day it was filed while it is not
    approved. Admin roles may edit any entry that is not approved.
    """
    timesheet = await timesheet_store.get_daily_timesheet(db, timesheet_id)
    if timesheet is None:
        raise NotFoundError("Timesheet not found.")

    is_admin = has_role(caller.role, ADMIN_ROLES)
    if not is_admin and caller.uuid != timesheet.employee_id:
        logger.warning(f"{caller.uuid} ({caller.role}) tried to edit timesheet {timesheet_id} of {timesheet.employee_id}")
        raise ForbiddenError("You can only update your own timesheets.")

    if not is_admin and timesheet.timesheet_date != date.today():
        raise BadRequestError(
            "You can only update timesheets on the same day they were created. "
            "This timesheet can no longer be edited."
        )

    if timesheet.approval_status == ApprovalStatus.APPROVED.value:
        raise BadRequestError("Cannot update an approved timesheet.")

    try:
        await timesheet_store.update_daily_timesheet(db, timesheet_id, {
            "task_details": [task.model_dump(exclude_none=True) for task in data.task_details],
            "total_hours": data.total_hours,
            "updated_by": caller.uuid,
        })
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to update daily timesheet {timesheet_id}: {e}", exc_info=True)
        raise InternalServerError("An error occurred while updating the timesheet. Please try again.")

    logger.info(f"Daily timesheet {timesheet_id} updated by {caller.uuid}")
    return {"success": True}


async def get_next_task_id(db: AsyncSession, employee_id: str, caller: AuthContext) -> NextTaskIdResponse:
    if not has_role(caller.role, ADMIN_ROLES) and caller.uuid != employee_id:
        raise ForbiddenError("You can only get task IDs for yourself.")
    current = await timesheet_store.get_max_task_number(db, employee_id)
    return NextTaskIdResponse(
        task_id=format_task_number(current + 1),
        task_number=current + 1,
        current_task_count=current,
    )

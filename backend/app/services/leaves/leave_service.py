"""
Leave applications and their multi-approver workflow.

Each leave carries a JSON list of approvers (reporting manager, optional
secondary approver, customer approver from an active allocation). The
overall status is REJECTED as soon as anyone rejects, APPROVED once every
approver approved or HR/super user approved, otherwise PENDING.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import BadRequestError, ForbiddenError, NotFoundError
from app.core.roles import (
    APPROVER_ROLES,
    HR_ROLES,
    LeaveApprovalStatus,
    Role,
    has_role,
)
from app.models.leave import EmployeeLeave
from app.schemas.auth import AuthContext
from app.schemas.common import Page, PageParams
from app.schemas.leave import (
    LeaveAllocationUpdate,
    LeaveApplyRequest,
    LeaveBalance,
    LeaveResponse,
    LeaveStatusUpdate,
)
from app.services.access import can_view_employee
from app.services.leaves import leave_calculation
from app.services.notifications import email_templates, get_email_service
from app.services.timesheets.helpers import generate_request_number
from app.stores import customer_store, employee_store, leave_store, project_store, user_store

logger = logging.getLogger("vodichron.leaves")

OPEN_STATUSES = [
    LeaveApprovalStatus.REQUESTED.value,
    LeaveApprovalStatus.PENDING.value,
    LeaveApprovalStatus.APPROVED.value,
]


def _approver_entry(approver_id: str, name: str, email: Optional[str], role: str) -> Dict[str, Any]:
    return {
        "approver_id": approver_id,
        "approver_name": name,
        "approver_email": email,
        "approver_role": role,
        "status": LeaveApprovalStatus.REQUESTED.value,
        "approver_comments": None,
        "approval_date": None,
    }


async def _employee_approver(db: AsyncSession, employee_id: str, missing_message: str) -> Dict[str, Any]:
    approver = await employee_store.get_employee(db, employee_id)
    if approver is None:
        raise BadRequestError(missing_message)
    user = await user_store.get_user_by_employee_id(db, employee_id)
    role = user.role if user else Role.MANAGER.value
    return _approver_entry(approver.uuid, approver.name, approver.official_email, role)


async def _build_approvers(db: AsyncSession, employee, secondary_approver_id: Optional[str]) -> List[Dict[str, Any]]:
    if not employee.reporting_manager_id:
        raise BadRequestError("Employee does not have a reporting manager assigned. Please contact HR.")

    approvers = [
        await _employee_approver(
            db, employee.reporting_manager_id, "Reporting manager details not found. Please contact HR."
        )
    ]

    if secondary_approver_id and secondary_approver_id != employee.reporting_manager_id:
        approvers.append(await _employee_approver(db, secondary_approver_id, "Secondary approver not found."))

    allocation = await project_store.find_customer_approver_allocation(db, employee.uuid)
    if allocation is not None:
        customer = await customer_store.get_customer(db, allocation.customer_id)
        if customer is not None:
            approvers.append(_approver_entry(customer.uuid, customer.name, customer.email, Role.CUSTOMER.value))

    return approvers


async def apply_leave(db: AsyncSession, data: LeaveApplyRequest, caller: AuthContext) -> dict:
    if caller.role == Role.EMPLOYEE.value and caller.uuid != data.employee_id:
        logger.warning(f"{caller.uuid} tried to apply leave for {data.employee_id}")
        raise ForbiddenError("You can only apply leave for yourself.")

    if data.leave_type not in leave_calculation.LEAVE_TYPES:
        raise BadRequestError(f"Invalid leave type, {data.leave_type}.")

    employee = await employee_store.get_employee(db, data.employee_id)
    if employee is None:
        raise BadRequestError("Employee not found. Please check employee ID.")

    if data.is_half_day and data.leave_start_date != data.leave_end_date:
        raise BadRequestError(
            "Half-day leave can only be applied for a single day. Start and end dates must be the same."
        )
    leave_days = leave_calculation.calculate_leave_days(data.leave_start_date, data.leave_end_date, data.is_half_day)

    overlap = await leave_store.find_overlapping_leave(
        db, data.employee_id, data.leave_start_date, data.leave_end_date, OPEN_STATUSES
    )
    if overlap is not None:
        raise BadRequestError("Leave dates overlap with an existing approved or pending leave request.")

    approvers = await _build_approvers(db, employee, data.secondary_approver_id)
    request_number = generate_request_number()

    leave = await leave_store.create_leave(db, {
        "request_number": request_number,
        "employee_id": data.employee_id,
        "leave_type": data.leave_type,
        "reason": data.reason,
        "leave_start_date": data.leave_start_date,
        "leave_end_date": data.leave_end_date,
        "leave_days": leave_days,
        "is_half_day": data.is_half_day,
        "leave_approvers": approvers,
        "leave_approval_status": LeaveApprovalStatus.REQUESTED.value,
        "created_by": caller.uuid,
        "updated_by": caller.uuid,
    })
    logger.info(f"Leave {leave.uuid} #{request_number} applied for {data.employee_id} ({leave_days} days)")

    await _notify_submission(employee, leave, approvers)
    return {"leave_uuid": leave.uuid, "request_number": request_number}


async def _notify_submission(employee, leave: EmployeeLeave, approvers: List[Dict[str, Any]]) -> None:
    email_service = get_email_service()
    start = leave.leave_start_date.strftime("%d-%m-%Y")
    end = leave.leave_end_date.strftime("%d-%m-%Y")
    for approver in approvers:
        if not approver.get("approver_email"):
            continue
        subject, html = email_templates.leave_submitted_approver_email(
            approver["approver_name"], employee.name, leave.request_number, leave.leave_type,
            start, end, leave.leave_days, leave.reason, settings.FRONTEND_URL,
        )
        await email_service.send_email(approver["approver_email"], subject, html)

    if employee.official_email:
        subject, html = email_templates.leave_submitted_employee_email(
            employee.name, leave.request_number, leave.leave_type, start, end, leave.leave_days, settings.FRONTEND_URL,
        )
        await email_service.send_email(employee.official_email, subject, html)


def resolve_final_status(approvers: List[Dict[str, Any]], decision: str, caller_role: str) -> str:
    if decision == LeaveApprovalStatus.REJECTED.value:
        return LeaveApprovalStatus.REJECTED.value
    if all(a.get("status") == LeaveApprovalStatus.APPROVED.value for a in approvers):
        return LeaveApprovalStatus.APPROVED.value
    if decision == LeaveApprovalStatus.APPROVED.value and has_role(caller_role, HR_ROLES):
        return LeaveApprovalStatus.APPROVED.value
    return LeaveApprovalStatus.PENDING.value


async def update_leave_status(
    db: AsyncSession, leave_id: str, update: LeaveStatusUpdate, caller: AuthContext
) -> dict:
    if not has_role(caller.role, APPROVER_ROLES):
        logger.warning(f"{caller.uuid} ({caller.role}) tried to update leave {leave_id}")
        raise ForbiddenError("Access denied. Only managers, directors, and HR can update leave status.")

    leave = await leave_store.get_leave(db, leave_id)
    if leave is None:
        raise BadRequestError("Leave request not found.")

    final_statuses = (LeaveApprovalStatus.APPROVED.value, LeaveApprovalStatus.REJECTED.value)
    if caller.role != Role.SUPER_USER.value and leave.leave_approval_status in final_statuses:
        raise BadRequestError(f"Leave is already {leave.leave_approval_status} and cannot be updated again.")

    approvers = [dict(a) for a in (leave.leave_approvers or [])]
    index = next((i for i, a in enumerate(approvers) if a.get("approver_id") == caller.uuid), None)
    now = datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S")

    if index is None:
        if not has_role(caller.role, HR_ROLES):
            raise ForbiddenError("Access denied. You are not an approver for this leave request.")
        approver = await employee_store.get_employee(db, caller.uuid)
        entry = _approver_entry(
            caller.uuid,
            approver.name if approver else (caller.name or caller.email or caller.uuid),
            approver.official_email if approver else caller.email,
            caller.role,
        )
        entry.update(status=update.approval_status, approver_comments=update.comment, approval_date=now)
        approvers.append(entry)
    else:
        approvers[index].update(status=update.approval_status, approver_comments=update.comment, approval_date=now)

    final_status = resolve_final_status(approvers, update.approval_status, caller.role)
    await leave_calculation.apply_status_transition(db, leave, final_status, caller.uuid)
    await leave_store.update_leave_status(db, leave_id, approvers, final_status, caller.uuid)
    logger.info(f"Leave {leave_id} {update.approval_status} by {caller.uuid}, now {final_status}")

    if final_status in final_statuses:
        await _notify_decision(db, leave, final_status, caller, update.comment)

    return {"message": f"Leave status updated to {final_status}.", "status": final_status}


async def _notify_decision(
    db: AsyncSession, leave: EmployeeLeave, status: str, caller: AuthContext, comment: Optional[str]
) -> None:
    employee = await employee_store.get_employee(db, leave.employee_id)
    if employee is None or not employee.official_email:
        return
    subject, html = email_templates.leave_decision_email(
        employee.name,
        status == LeaveApprovalStatus.APPROVED.value,
        leave.request_number,
        leave.leave_type,
        leave.leave_start_date.strftime("%d-%m-%Y"),
        leave.leave_end_date.strftime("%d-%m-%Y"),
        leave.leave_days,
        caller.name or caller.email or caller.uuid,
        comment,
        settings.FRONTEND_URL,
    )
    await get_email_service().send_email(employee.official_email, subject, html)


def _to_response(leave: EmployeeLeave, employee_name: Optional[str] = None) -> LeaveResponse:
    response = LeaveResponse.model_validate(leave)
    response.employee_name = employee_name
    return response


async def list_employee_leaves(
    db: AsyncSession, employee_id: str, caller: AuthContext, params: PageParams
) -> Page[LeaveResponse]:
    if not await can_view_employee(db, caller, employee_id):
        raise ForbiddenError("Access denied for the operation request.")
    leaves, total = await leave_store.list_employee_leaves(db, employee_id, params.offset, params.page_size)
    return Page[LeaveResponse](
        items=[_to_response(leave) for leave in leaves],
        page=params.page,
        page_size=params.page_size,
        total=total,
    )


async def list_reportee_leaves(db: AsyncSession, caller: AuthContext, params: PageParams) -> Page[LeaveResponse]:
    """Leaves awaiting the caller as an approver; HR and super users see every leave."""
    if not has_role(caller.role, APPROVER_ROLES):
        raise ForbiddenError("Access denied for the operation request.")
    approver_id = None if has_role(caller.role, HR_ROLES) else caller.uuid
    rows, total = await leave_store.list_reportee_leaves(db, approver_id, params.offset, params.page_size)
    return Page[LeaveResponse](
        items=[_to_response(leave, name) for leave, name in rows],
        page=params.page,
        page_size=params.page_size,
        total=total,
    )


async def get_leave_balance(
    db: AsyncSession, employee_id: str, caller: AuthContext, year: Optional[int] = None
) -> List[LeaveBalance]:
    if caller.role == Role.EMPLOYEE.value and caller.uuid != employee_id:
        raise ForbiddenError("Access denied. You can only view your own leave balance.")

    employee = await employee_store.get_employee(db, employee_id)
    if employee is None:
        raise NotFoundError("Employee not found.")

    year = year or date.today().year
    applied = await leave_store.approved_days_by_type(db, employee_id, date(year, 1, 1), date(year, 12, 31))
    carry_forwarded = {
        allocation.leave_type: float(allocation.leaves_carry_forwarded or 0)
        for allocation in await leave_store.get_allocations(db, employee_id, str(year))
    }
    return leave_calculation.calculate_leave_balance(employee.date_of_joining, year, applied, carry_forwarded)


async def get_leave_allocations(
    db: AsyncSession, employee_id: str, caller: AuthContext, year: Optional[int] = None
) -> list:
    if not has_role(caller.role, HR_ROLES) and caller.uuid != employee_id:
        raise ForbiddenError("Access denied for the operation request.")
    year = year or date.today().year
    return await leave_store.get_allocations(db, employee_id, str(year))


async def update_leave_allocations(
    db: AsyncSession, employee_id: str, payload: LeaveAllocationUpdate, caller: AuthContext
) -> dict:
    if not has_role(caller.role, HR_ROLES):
        logger.warning(f"{caller.uuid} ({caller.role}) tried to update leave allocations of {employee_id}")
        raise ForbiddenError("Access denied for the operation request.")
    if not payload.allocations:
        raise BadRequestError("Leave allocations are required.")
    if await employee_store.get_employee(db, employee_id) is None:
        raise NotFoundError("Employee not found.")

    year = payload.year or str(date.today().year)
    await leave_store.upsert_allocations(
        db, employee_id, year, [item.model_dump() for item in payload.allocations], caller.uuid
    )
    logger.info(f"{caller.uuid} updated {len(payload.allocations)} leave allocation(s) of {employee_id} for {year}")
    return {"message": "Leave allocation updated successfully.", "count": len(payload.allocations)}


async def allocate_yearly_leaves(db: AsyncSession, caller: AuthContext, year: Optional[int] = None) -> dict:
    """Create next-year allocations (with CL/PL carry forward) for every employee."""
    if not has_role(caller.role, HR_ROLES):
        raise ForbiddenError("Access denied for the operation request.")
    year = year or date.today().year
    employee_ids = await leave_store.list_employees_with_allocations(db, str(year - 1))
    for employee in await employee_store.get_employees(db, employee_ids):
        await leave_calculation.allocate_leaves_for_employee(
            db, employee.uuid, employee.date_of_joining, year, caller.uuid
        )
    logger.info(f"Allocated {year} leaves for {len(employee_ids)} employee(s)")
    return {"year": year, "count": len(employee_ids)}

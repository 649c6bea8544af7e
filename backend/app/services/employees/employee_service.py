"""
Employee records: create, read, update, delete, list and search.

PII columns (PAN, Aadhaar, bank and PF account numbers) are encrypted by the
column type, so values read back through the ORM are already decrypted.
"""

import logging
from datetime import date
from typing import List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BadRequestError, ForbiddenError, InternalServerError, NotFoundError
from app.core.roles import ADMIN_ROLES, HR_ROLES, Role, has_role
from app.schemas.auth import AuthContext
from app.schemas.common import Page, PageParams
from app.schemas.employee import (
    ApproverSearchResult,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeSummary,
    EmployeeUpdate,
)
from app.services.access import can_view_employee
from app.services.leaves.leave_calculation import allocate_leaves_for_employee
from app.stores import employee_store

logger = logging.getLogger("vodichron.employees")

ACCESS_DENIED = "Access denied for the operation request."
HR_ONLY_FIELDS = frozenset({
    "reporting_manager_id",
    "reporting_director_id",
    "designation",
    "department",
    "employment_status",
    "employee_code",
    "date_of_joining",
})
APPROVER_SEARCH_ROLES = [Role.MANAGER.value, Role.DIRECTOR.value, Role.HR.value]


async def _ensure_unique(db: AsyncSession, personal_email, official_email, employee_code, exclude_id=None) -> None:
    existing = await employee_store.find_employee_by_emails(db, personal_email, official_email)
    if existing is not None and existing.uuid != exclude_id:
        raise BadRequestError("Employee with the same personal or official email already exists.")
    if employee_code:
        existing = await employee_store.find_employee_by_code(db, employee_code)
        if existing is not None and existing.uuid != exclude_id:
            raise BadRequestError(f"Employee with code {employee_code} already exists.")


async def create_employee(db: AsyncSession, data: EmployeeCreate, caller: AuthContext) -> EmployeeResponse:
    if not has_role(caller.role, ADMIN_ROLES):
        logger.warning(f"{caller.uuid} ({caller.role}) tried to create an employee")
        raise ForbiddenError(ACCESS_DENIED)

    await _ensure_unique(db, data.personal_email, data.official_email, data.employee_code)

    try:
        employee = await employee_store.create_employee(db, {
            **data.model_dump(),
            "employment_status": "ACTIVE",
            "created_by": caller.uuid,
            "updated_by": caller.uuid,
        })
    except IntegrityError:
        await db.rollback()
        raise BadRequestError("Employee with the same email or employee code already exists.")

    employee_id = employee.uuid
    try:
        await allocate_leaves_for_employee(db, employee_id, data.date_of_joining, date.today().year, caller.uuid)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Leave allocation failed for new employee {employee_id}: {e}")
        await employee_store.delete_employee(db, employee_id)
        raise InternalServerError("Unable to allocate leaves for the employee. Please try again.")

    logger.info(f"Employee {employee_id} created by {caller.uuid}")
    return EmployeeResponse.model_validate(employee)


async def get_employee(db: AsyncSession, employee_id: str, caller: AuthContext) -> EmployeeResponse:
    if not await can_view_employee(db, caller, employee_id):
        raise ForbiddenError(ACCESS_DENIED)
    employee = await employee_store.get_employee(db, employee_id)
    if employee is None:
        raise NotFoundError("Unable to find the employee details.")
    return EmployeeResponse.model_validate(employee)


async def update_employee(
    db: AsyncSession, employee_id: str, data: EmployeeUpdate, caller: AuthContext
) -> EmployeeResponse:
    is_hr = has_role(caller.role, HR_ROLES)
    if not is_hr and caller.uuid != employee_id:
        raise ForbiddenError(ACCESS_DENIED)

    if await employee_store.get_employee(db, employee_id) is None:
        raise BadRequestError("Unable to find the details of the employee to update.")

    values = data.model_dump(exclude_unset=True)
    if not is_hr:
        dropped = HR_ONLY_FIELDS.intersection(values)
        if dropped:
            logger.warning(f"{caller.uuid} cannot change {sorted(dropped)} on their own record")
        values = {k: v for k, v in values.items() if k not in HR_ONLY_FIELDS}

    await _ensure_unique(
        db, values.get("personal_email"), values.get("official_email"), values.get("employee_code"), employee_id
    )

    values["updated_by"] = caller.uuid
    await employee_store.update_employee(db, employee_id, values)
    logger.info(f"Employee {employee_id} updated by {caller.uuid}")
    return EmployeeResponse.model_validate(await employee_store.get_employee(db, employee_id))


async def delete_employee(db: AsyncSession, employee_id: str, caller: AuthContext) -> None:
    if not has_role(caller.role, HR_ROLES):
        raise ForbiddenError(ACCESS_DENIED)
    if not await employee_store.delete_employee(db, employee_id):
        raise NotFoundError("Unable to find the employee details.")
    logger.info(f"Employee {employee_id} deleted by {caller.uuid}")


async def list_employees(db: AsyncSession, caller: AuthContext, params: PageParams) -> Page[EmployeeSummary]:
    if not has_role(caller.role, ADMIN_ROLES):
        raise ForbiddenError(ACCESS_DENIED)
    employees, total = await employee_store.list_employees(db, params.offset, params.page_size)
    return Page[EmployeeSummary](
        items=[EmployeeSummary.model_validate(e) for e in employees],
        page=params.page,
        page_size=params.page_size,
        total=total,
    )


async def search_employees(db: AsyncSession, keyword: str, caller: AuthContext) -> List[EmployeeSummary]:
    if not has_role(caller.role, ADMIN_ROLES):
        raise ForbiddenError(ACCESS_DENIED)
    return [EmployeeSummary.model_validate(e) for e in await employee_store.search_employees(db, keyword.strip())]


async def search_leave_approvers(db: AsyncSession, keyword: str) -> List[ApproverSearchResult]:
    """Active managers, directors and HR matching the keyword, for the secondary approver picker."""
    rows = await employee_store.search_employees_by_roles(db, keyword.strip(), APPROVER_SEARCH_ROLES)
    return [
        ApproverSearchResult(uuid=e.uuid, name=e.name, official_email=e.official_email, role=role)
        for e, role in rows
    ]

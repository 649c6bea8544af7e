"""
Projects and the allocation of employees to customer projects.

An allocation flagged `customer_approver` makes the customer an approver of
the employee's leave requests.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BadRequestError, ForbiddenError, NotFoundError
from app.core.roles import ADMIN_ROLES, has_role
from app.schemas.auth import AuthContext
from app.schemas.common import Page, PageParams
from app.schemas.project import (
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    ResourceAllocationCreate,
    ResourceAllocationResponse,
    ResourceAllocationUpdate,
)
from app.services.access import can_view_employee
from app.stores import customer_store, employee_store, project_store

logger = logging.getLogger("vodichron.projects")

ACCESS_DENIED = "Access denied for the operation request."
PROJECT_NOT_FOUND = "Unable to find the project details."
ALLOCATION_NOT_FOUND = "Unable to find the resource allocation."


def _require_admin(caller: AuthContext) -> None:
    if not has_role(caller.role, ADMIN_ROLES):
        logger.warning(f"{caller.uuid} ({caller.role}) denied project administration")
        raise ForbiddenError(ACCESS_DENIED)


def _check_dates(start, end) -> None:
    if start and end and end < start:
        raise BadRequestError("End date cannot be before start date.")


def allocation_code(sequence: int) -> str:
    return f"RA{sequence:05d}"


async def create_project(db: AsyncSession, data: ProjectCreate, caller: AuthContext) -> ProjectResponse:
    _require_admin(caller)
    _check_dates(data.start_date, data.end_date)
    project = await project_store.create_project(db, {
        **data.model_dump(),
        "created_by": caller.uuid,
        "updated_by": caller.uuid,
    })
    logger.info(f"Project {project.uuid} '{project.name}' created by {caller.uuid}")
    return ProjectResponse.model_validate(project)


async def get_project(db: AsyncSession, project_id: str) -> ProjectResponse:
    project = await project_store.get_project(db, project_id)
    if project is None:
        raise NotFoundError(PROJECT_NOT_FOUND)
    return ProjectResponse.model_validate(project)


async def update_project(
    db: AsyncSession, project_id: str, data: ProjectUpdate, caller: AuthContext
) -> ProjectResponse:
    _require_admin(caller)
    project = await project_store.get_project(db, project_id)
    if project is None:
        raise NotFoundError(PROJECT_NOT_FOUND)

    values = data.model_dump(exclude_unset=True)
    _check_dates(values.get("start_date", project.start_date), values.get("end_date", project.end_date))
    values["updated_by"] = caller.uuid
    await project_store.update_project(db, project_id, values)
    logger.info(f"Project {project_id} updated by {caller.uuid}")
    return ProjectResponse.model_validate(await project_store.get_project(db, project_id))


async def delete_project(db: AsyncSession, project_id: str, caller: AuthContext) -> None:
    _require_admin(caller)
    if not await project_store.delete_project(db, project_id):
        raise NotFoundError(PROJECT_NOT_FOUND)
    logger.info(f"Project {project_id} deleted by {caller.uuid}")


async def list_projects(db: AsyncSession, params: PageParams) -> Page[ProjectResponse]:
    projects, total = await project_store.list_projects(db, params.offset, params.page_size)
    return Page[ProjectResponse](
        items=[ProjectResponse.model_validate(p) for p in projects],
        page=params.page,
        page_size=params.page_size,
        total=total,
    )


async def create_allocation(
    db: AsyncSession, data: ResourceAllocationCreate, caller: AuthContext
) -> ResourceAllocationResponse:
    _require_admin(caller)
    _check_dates(data.start_date, data.end_date)

    if await project_store.get_project(db, data.project_id) is None:
        raise BadRequestError(PROJECT_NOT_FOUND)
    if await customer_store.get_customer(db, data.customer_id) is None:
        raise BadRequestError("Unable to find the customer details")
    if await employee_store.get_employee(db, data.employee_id) is None:
        raise BadRequestError("Employee not found. Please check employee ID.")
    if await project_store.find_allocation(db, data.project_id, data.customer_id, data.employee_id):
        raise BadRequestError("Employee is already allocated to this project for the customer.")

    try:
        allocation = await project_store.create_allocation(db, {
            **data.model_dump(),
            "allocation_code": allocation_code(await project_store.count_allocations(db) + 1),
            "status": "ACTIVE",
            "created_by": caller.uuid,
            "updated_by": caller.uuid,
        })
    except IntegrityError:
        await db.rollback()
        raise BadRequestError("Employee is already allocated to this project for the customer.")

    logger.info(
        f"Allocation {allocation.allocation_code}: employee {data.employee_id} on project {data.project_id} "
        f"for customer {data.customer_id}"
    )
    return ResourceAllocationResponse.model_validate(allocation)


async def update_allocation(
    db: AsyncSession, allocation_id: str, data: ResourceAllocationUpdate, caller: AuthContext
) -> ResourceAllocationResponse:
    _require_admin(caller)
    allocation = await project_store.get_allocation(db, allocation_id)
    if allocation is None:
        raise NotFoundError(ALLOCATION_NOT_FOUND)

    values = data.model_dump(exclude_unset=True)
    _check_dates(values.get("start_date", allocation.start_date), values.get("end_date", allocation.end_date))
    values["updated_by"] = caller.uuid
    await project_store.update_allocation(db, allocation_id, values)
    return ResourceAllocationResponse.model_validate(await project_store.get_allocation(db, allocation_id))


async def delete_allocation(db: AsyncSession, allocation_id: str, caller: AuthContext) -> None:
    _require_admin(caller)
    if not await project_store.delete_allocation(db, allocation_id):
        raise NotFoundError(ALLOCATION_NOT_FOUND)
    logger.info(f"Allocation {allocation_id} deleted by {caller.uuid}")


async def list_allocations(
    db: AsyncSession,
    caller: AuthContext,
    project_id: Optional[str] = None,
    employee_id: Optional[str] = None,
) -> List[ResourceAllocationResponse]:
    if employee_id is not None:
        if not await can_view_employee(db, caller, employee_id):
            raise ForbiddenError(ACCESS_DENIED)
    elif not has_role(caller.role, ADMIN_ROLES):
        raise ForbiddenError(ACCESS_DENIED)
    allocations = await project_store.list_allocations(db, project_id=project_id, employee_id=employee_id)
    return [ResourceAllocationResponse.model_validate(a) for a in allocations]

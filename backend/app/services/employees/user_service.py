"""
Application users (employee logins) and customer portal access.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import BadRequestError, ForbiddenError, NotFoundError
from app.core.roles import ADMIN_ROLES, HR_ROLES, RecordStatus, has_role
from app.core.security import compare_passwords, generate_random_string, get_password_hash
from app.schemas.auth import AuthContext
from app.schemas.common import Page, PageParams
from app.schemas.user import (
    ApplicationUserCreate,
    ApplicationUserResponse,
    ApplicationUserUpdate,
    CustomerAccessCreate,
    CustomerAccessResponse,
    PasswordChange,
    ProfileResponse,
)
from app.services.notifications import email_templates, get_email_service
from app.stores import auth_store, customer_store, employee_store, user_store

logger = logging.getLogger("vodichron.users")

ACCESS_DENIED = "Access denied for the operation request."
FIRST_PASSWORD_CHANGE = "FIRST_PASSWORD_CHANGE"


def _user_response(user, employee=None) -> ApplicationUserResponse:
    response = ApplicationUserResponse.model_validate(user)
    if employee is not None:
        response.employee_name = employee.name
        response.official_email = employee.official_email
    return response


async def register_user(db: AsyncSession, data: ApplicationUserCreate, caller: AuthContext) -> ApplicationUserResponse:
    if not has_role(caller.role, ADMIN_ROLES):
        raise ForbiddenError(ACCESS_DENIED)

    employee = await employee_store.get_employee(db, data.employee_id)
    if employee is None:
        raise BadRequestError("Employee not found. Please check employee ID.")
    if await user_store.get_user_by_employee_id(db, data.employee_id):
        raise BadRequestError("Application user already exists for the employee.")

    try:
        user = await user_store.create_user(db, {
            "employee_id": data.employee_id,
            "role": data.role,
            "password": get_password_hash(data.password),
            "status": RecordStatus.ACTIVE.value,
            "is_system_generated": True,
            "created_by": caller.uuid,
            "updated_by": caller.uuid,
        })
    except IntegrityError:
        await db.rollback()
        raise BadRequestError("Application user already exists for the employee.")

    logger.info(f"Application user for {data.employee_id} registered as {data.role} by {caller.uuid}")
    if employee.official_email:
        subject, html = email_templates.welcome_email(
            employee.name, employee.official_email, data.password, settings.FRONTEND_URL
        )
        await get_email_service().send_email(employee.official_email, subject, html)
    return _user_response(user, employee)


async def update_user(
    db: AsyncSession, user_id: str, data: ApplicationUserUpdate, caller: AuthContext
) -> ApplicationUserResponse:
    if not has_role(caller.role, HR_ROLES):
        raise ForbiddenError(ACCESS_DENIED)
    values = data.model_dump(exclude_unset=True, exclude_none=True)
    if not values:
        raise BadRequestError("Nothing to update.")
    values["updated_by"] = caller.uuid
    if not await user_store.update_user(db, user_id, values):
        raise NotFoundError("Application user not found.")
    logger.info(f"Application user {user_id} updated by {caller.uuid}: {sorted(values)}")
    return _user_response(await user_store.get_user(db, user_id))


async def change_password(db: AsyncSession, data: PasswordChange, caller: AuthContext) -> None:
    user = await user_store.get_user_by_employee_id(db, caller.uuid)
    if user is None:
        raise NotFoundError("Application user not found.")
    if not compare_passwords(data.current_password, user.password):
        raise BadRequestError("Current password is incorrect.")

    first_change = user.is_system_generated
    await user_store.update_user(db, user.uuid, {
        "password": get_password_hash(data.new_password),
        "password_update_timestamp": datetime.utcnow(),
        "is_system_generated": False,
        "updated_by": caller.uuid,
    })
    if first_change:
        await employee_store.record_activity(db, caller.uuid, FIRST_PASSWORD_CHANGE, {"changed": True})
    logger.info(f"Password changed for {caller.uuid}")


async def list_users(db: AsyncSession, caller: AuthContext, params: PageParams) -> Page[ApplicationUserResponse]:
    if not has_role(caller.role, ADMIN_ROLES):
        raise ForbiddenError(ACCESS_DENIED)
    rows, total = await user_store.list_users(db, params.offset, params.page_size)
    return Page[ApplicationUserResponse](
        items=[_user_response(user, employee) for user, employee in rows],
        page=params.page,
        page_size=params.page_size,
        total=total,
    )


async def create_customer_access(
    db: AsyncSession, data: CustomerAccessCreate, caller: AuthContext
) -> CustomerAccessResponse:
    if not has_role(caller.role, ADMIN_ROLES):
        raise ForbiddenError(ACCESS_DENIED)

    customer = await customer_store.get_customer(db, data.customer_id)
    if customer is None:
        raise NotFoundError("Unable to find the customer details")
    if await auth_store.find_customer_access(db, data.customer_id):
        raise BadRequestError("Customer access already exists.")

    password = data.password or generate_random_string(12)
    access = await user_store.create_customer_access(db, {
        "customer_id": data.customer_id,
        "password": get_password_hash(password),
        "status": RecordStatus.ACTIVE.value,
        "is_system_generated": data.password is None,
        "created_by": caller.uuid,
        "updated_by": caller.uuid,
    })
    logger.info(f"Customer access created for {data.customer_id} by {caller.uuid}")

    subject, html = email_templates.welcome_email(customer.name, customer.email, password, settings.FRONTEND_URL)
    await get_email_service().send_email(customer.email, subject, html)
    return CustomerAccessResponse.model_validate(access)


async def get_profile(db: AsyncSession, caller: AuthContext) -> ProfileResponse:
    if caller.type == "customer":
        customer = await customer_store.get_customer(db, caller.uuid)
        if customer is None:
            raise NotFoundError("Unable to find the customer details")
        access = await auth_store.find_customer_access(db, caller.uuid)
        return ProfileResponse(
            uuid=customer.uuid,
            type=caller.type,
            role=caller.role,
            name=customer.name,
            email=customer.email,
            last_login=access.last_login if access else None,
        )

    employee = await employee_store.get_employee(db, caller.uuid)
    if employee is None:
        raise NotFoundError("Unable to find the employee details.")
    user = await user_store.get_user_by_employee_id(db, caller.uuid)
    return ProfileResponse(
        uuid=employee.uuid,
        type=caller.type,
        role=caller.role,
        name=employee.name,
        email=employee.official_email,
        designation=employee.designation,
        department=employee.department,
        last_login=user.last_login if user else None,
    )

"""
Customer accounts managed by super users and admins.
"""

import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BadRequestError, ForbiddenError, NotFoundError
from app.core.roles import ADMIN_ROLES, CUSTOMER_ADMIN_ROLES, Role, has_role
from app.schemas.auth import AuthContext
from app.schemas.common import Page, PageParams
from app.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from app.stores import customer_store

logger = logging.getLogger("vodichron.customers")

ACCESS_DENIED = "Access denied for the operation request."
CUSTOMER_NOT_FOUND = "Unable to find the customer details"


def _duplicate(email: str) -> BadRequestError:
    return BadRequestError(f"Customer with email {email} already exists.")


async def create_customer(db: AsyncSession, data: CustomerCreate, caller: AuthContext) -> CustomerResponse:
    if not has_role(caller.role, CUSTOMER_ADMIN_ROLES):
        logger.warning(f"{caller.uuid} ({caller.role}) tried to create a customer")
        raise ForbiddenError(ACCESS_DENIED)
    if await customer_store.find_customer_by_email(db, data.email):
        raise _duplicate(data.email)

    try:
        customer = await customer_store.create_customer(db, {
            **data.model_dump(),
            "status": "ACTIVE",
            "created_by": caller.uuid,
            "updated_by": caller.uuid,
        })
    except IntegrityError:
        await db.rollback()
        raise _duplicate(data.email)

    logger.info(f"Customer {customer.uuid} created by {caller.uuid}")
    return CustomerResponse.model_validate(customer)


async def get_customer(db: AsyncSession, customer_id: str, caller: AuthContext) -> CustomerResponse:
    if caller.role == Role.CUSTOMER.value and caller.uuid != customer_id:
        raise ForbiddenError(ACCESS_DENIED)
    customer = await customer_store.get_customer(db, customer_id)
    if customer is None:
        raise NotFoundError(CUSTOMER_NOT_FOUND)
    return CustomerResponse.model_validate(customer)


async def update_customer(
    db: AsyncSession, customer_id: str, data: CustomerUpdate, caller: AuthContext
) -> CustomerResponse:
    is_customer = caller.role == Role.CUSTOMER.value
    if is_customer and caller.uuid != customer_id:
        raise ForbiddenError(ACCESS_DENIED)
    if not is_customer and not has_role(caller.role, CUSTOMER_ADMIN_ROLES):
        raise ForbiddenError(ACCESS_DENIED)

    if await customer_store.get_customer(db, customer_id) is None:
        raise NotFoundError(CUSTOMER_NOT_FOUND)

    values = data.model_dump(exclude_unset=True)
    if is_customer:
        values.pop("status", None)
    if values.get("email"):
        existing = await customer_store.find_customer_by_email(db, values["email"])
        if existing is not None and existing.uuid != customer_id:
            raise _duplicate(values["email"])

    values["updated_by"] = caller.uuid
    await customer_store.update_customer(db, customer_id, values)
    logger.info(f"Customer {customer_id} updated by {caller.uuid}")
    return CustomerResponse.model_validate(await customer_store.get_customer(db, customer_id))


async def delete_customer(db: AsyncSession, customer_id: str, caller: AuthContext) -> None:
    if not has_role(caller.role, CUSTOMER_ADMIN_ROLES):
        raise ForbiddenError(ACCESS_DENIED)
    if not await customer_store.delete_customer(db, customer_id):
        raise NotFoundError(CUSTOMER_NOT_FOUND)
    logger.info(f"Customer {customer_id} deleted by {caller.uuid}")


async def list_customers(db: AsyncSession, caller: AuthContext, params: PageParams) -> Page[CustomerResponse]:
    if not has_role(caller.role, ADMIN_ROLES):
        raise ForbiddenError(ACCESS_DENIED)
    customers, total = await customer_store.list_customers(db, params.offset, params.page_size)
    return Page[CustomerResponse](
        items=[CustomerResponse.model_validate(c) for c in customers],
        page=params.page,
        page_size=params.page_size,
        total=total,
    )


async def search_customers(db: AsyncSession, keyword: str, caller: AuthContext) -> List[CustomerResponse]:
    if not has_role(caller.role, ADMIN_ROLES):
        raise ForbiddenError(ACCESS_DENIED)
    return [CustomerResponse.model_validate(c) for c in await customer_store.search_customers(db, keyword.strip())]

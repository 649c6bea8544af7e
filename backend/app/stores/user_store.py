from typing import Any, List, Optional, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.customer import CustomerAppAccess
from app.models.employee import Employee
from app.models.user import ApplicationUser


async def get_user(db: AsyncSession, user_id: str) -> Optional[ApplicationUser]:
    return await db.scalar(select(ApplicationUser).where(ApplicationUser.uuid == user_id))


async def get_user_by_employee_id(db: AsyncSession, employee_id: str) -> Optional[ApplicationUser]:
    return await db.scalar(select(ApplicationUser).where(ApplicationUser.employee_id == employee_id))


async def create_user(db: AsyncSession, values: dict[str, Any]) -> ApplicationUser:
    user = ApplicationUser(**values)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def update_user(db: AsyncSession, user_id: str, values: dict[str, Any]) -> int:
    result = await db.execute(update(ApplicationUser).where(ApplicationUser.uuid == user_id).values(**values))
    await db.commit()
    return result.rowcount or 0


async def list_users(db: AsyncSession, offset: int, limit: int) -> Tuple[List[Tuple[ApplicationUser, Employee]], int]:
    total = await db.scalar(select(func.count()).select_from(ApplicationUser))
    result = await db.execute(
        select(ApplicationUser, Employee)
        .join(Employee, Employee.uuid == ApplicationUser.employee_id)
        .order_by(Employee.name)
        .offset(offset)
        .limit(limit)
    )
    return [(row[0], row[1]) for row in result.all()], total or 0


async def create_customer_access(db: AsyncSession, values: dict[str, Any]) -> CustomerAppAccess:
    access = CustomerAppAccess(**values)
    db.add(access)
    await db.commit()
    await db.refresh(access)
    return access

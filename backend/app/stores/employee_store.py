from typing import Any, List, Optional, Tuple

from sqlalchemy import select, update, delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.employee import Employee, EmployeeActivity
from app.models.user import ApplicationUser


async def get_employee(db: AsyncSession, employee_id: str) -> Optional[Employee]:
    return await db.scalar(select(Employee).where(Employee.uuid == employee_id))


async def get_employees(db: AsyncSession, employee_ids: List[str]) -> List[Employee]:
    if not employee_ids:
        return []
    result = await db.execute(select(Employee).where(Employee.uuid.in_(employee_ids)))
    return list(result.scalars().all())


async def find_employee_by_emails(
    db: AsyncSession, personal_email: Optional[str], official_email: Optional[str]
) -> Optional[Employee]:
    conditions = []
    if personal_email:
        conditions.append(Employee.personal_email == personal_email)
    if official_email:
        conditions.append(Employee.official_email == official_email)
    if not conditions:
        return None
    return await db.scalar(select(Employee).where(or_(*conditions)).limit(1))


async def find_employee_by_code(db: AsyncSession, employee_code: str) -> Optional[Employee]:
    return await db.scalar(select(Employee).where(Employee.employee_code == employee_code))


async def create_employee(db: AsyncSession, values: dict[str, Any]) -> Employee:
    employee = Employee(**values)
    db.add(employee)
    await db.commit()
    await db.refresh(employee)
    return employee


async def update_employee(db: AsyncSession, employee_id: str, values: dict[str, Any]) -> int:
    if not values:
        return 0
    result = await db.execute(update(Employee).where(Employee.uuid == employee_id).values(**values))
    await db.commit()
    return result.rowcount or 0


async def delete_employee(db: AsyncSession, employee_id: str) -> int:
    result = await db.execute(delete(Employee).where(Employee.uuid == employee_id))
    await db.commit()
    return result.rowcount or 0


async def list_employees(db: AsyncSession, offset: int, limit: int) -> Tuple[List[Employee], int]:
    total = await db.scalar(select(func.count()).select_from(Employee))
    result = await db.execute(select(Employee).order_by(Employee.name).offset(offset).limit(limit))
    return list(result.scalars().all()), total or 0


async def search_employees(db: AsyncSession, keyword: str, limit: int = 20) -> List[Employee]:
    pattern = f"%{keyword}%"
    result = await db.execute(
        select(Employee)
        .where(
            or_(
                Employee.name.ilike(pattern),
                Employee.official_email.ilike(pattern),
                Employee.employee_code.ilike(pattern),
            )
        )
        .order_by(Employee.name)
        .limit(limit)
    )
    return list(result.scalars().all())


async def search_employees_by_roles(
    db: AsyncSession, keyword: str, roles: List[str], limit: int = 20
) -> List[Tuple[Employee, str]]:
    pattern = f"%{keyword}%"
    result = await db.execute(
        select(Employee, ApplicationUser.role)
        .join(ApplicationUser, ApplicationUser.employee_id == Employee.uuid)
        .where(
            ApplicationUser.role.in_(roles),
            ApplicationUser.status == "ACTIVE",
            or_(Employee.name.ilike(pattern), Employee.official_email.ilike(pattern)),
        )
        .order_by(Employee.name)
        .limit(limit)
    )
    return [(row[0], row[1]) for row in result.all()]


async def list_reportee_ids(db: AsyncSession, supervisor_id: str) -> List[str]:
    """Employees whose reporting manager or director is `supervisor_id`."""
    result = await db.execute(
        select(Employee.uuid).where(
            or_(
                Employee.reporting_manager_id == supervisor_id,
                Employee.reporting_director_id == supervisor_id,
            )
        )
    )
    return list(result.scalars().all())


async def record_activity(db: AsyncSession, employee_id: str, activity_name: str, value: Any = None) -> None:
    db.add(EmployeeActivity(employee_id=employee_id, activity_name=activity_name, value=value))
    await db.commit()

from typing import Any, List, Optional, Tuple

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.project import Project, ProjectResourceAllocation


async def get_project(db: AsyncSession, project_id: str) -> Optional[Project]:
    return await db.scalar(select(Project).where(Project.uuid == project_id))


async def create_project(db: AsyncSession, values: dict[str, Any]) -> Project:
    project = Project(**values)
    db.add(project)
    await db.commit()
    await db.refresh(project)
    return project


async def update_project(db: AsyncSession, project_id: str, values: dict[str, Any]) -> int:
    result = await db.execute(update(Project).where(Project.uuid == project_id).values(**values))
    await db.commit()
    return result.rowcount or 0


async def delete_project(db: AsyncSession, project_id: str) -> int:
    result = await db.execute(delete(Project).where(Project.uuid == project_id))
    await db.commit()
    return result.rowcount or 0


async def list_projects(db: AsyncSession, offset: int, limit: int) -> Tuple[List[Project], int]:
    total = await db.scalar(select(func.count()).select_from(Project))
    result = await db.execute(select(Project).order_by(Project.name).offset(offset).limit(limit))
    return list(result.scalars().all()), total or 0


async def count_allocations(db: AsyncSession) -> int:
    return await db.scalar(select(func.count()).select_from(ProjectResourceAllocation)) or 0


async def find_allocation(
    db: AsyncSession, project_id: str, customer_id: str, employee_id: str
) -> Optional[ProjectResourceAllocation]:
    return await db.scalar(
        select(ProjectResourceAllocation).where(
            ProjectResourceAllocation.project_id == project_id,
            ProjectResourceAllocation.customer_id == customer_id,
            ProjectResourceAllocation.employee_id == employee_id,
        )
    )


async def get_allocation(db: AsyncSession, allocation_id: str) -> Optional[ProjectResourceAllocation]:
    return await db.scalar(select(ProjectResourceAllocation).where(ProjectResourceAllocation.uuid == allocation_id))


async def create_allocation(db: AsyncSession, values: dict[str, Any]) -> ProjectResourceAllocation:
    allocation = ProjectResourceAllocation(**values)
    db.add(allocation)
    await db.commit()
    await db.refresh(allocation)
    return allocation


async def update_allocation(db: AsyncSession, allocation_id: str, values: dict[str, Any]) -> int:
    result = await db.execute(
        update(ProjectResourceAllocation).where(ProjectResourceAllocation.uuid == allocation_id).values(**values)
    )
    await db.commit()
    return result.rowcount or 0


async def delete_allocation(db: AsyncSession, allocation_id: str) -> int:
    result = await db.execute(delete(ProjectResourceAllocation).where(ProjectResourceAllocation.uuid == allocation_id))
    await db.commit()
    return result.rowcount or 0


async def list_allocations(
    db: AsyncSession, project_id: Optional[str] = None, employee_id: Optional[str] = None
) -> List[ProjectResourceAllocation]:
    query = select(ProjectResourceAllocation)
    if project_id:
        query = query.where(ProjectResourceAllocation.project_id == project_id)
    if employee_id:
        query = query.where(ProjectResourceAllocation.employee_id == employee_id)
    result = await db.execute(query.order_by(ProjectResourceAllocation.allocation_code))
    return list(result.scalars().all())


async def find_customer_approver_allocation(db: AsyncSession, employee_id: str) -> Optional[ProjectResourceAllocation]:
    """Active allocation of the employee that routes leave approval to the customer."""
    return await db.scalar(
        select(ProjectResourceAllocation)
        .where(
            ProjectResourceAllocation.employee_id == employee_id,
            ProjectResourceAllocation.status == "ACTIVE",
            ProjectResourceAllocation.customer_approver.is_(True),
        )
        .limit(1)
    )


async def list_employee_ids_for_customer(db: AsyncSession, customer_id: str) -> List[str]:
    result = await db.execute(
        select(ProjectResourceAllocation.employee_id)
        .where(
            ProjectResourceAllocation.customer_id == customer_id,
            ProjectResourceAllocation.status == "ACTIVE",
        )
        .distinct()
    )
    return list(result.scalars().all())

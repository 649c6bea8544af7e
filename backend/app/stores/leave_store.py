from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, update, func, cast, or_
from sqlalchemy.dialects.postgresql import JSONB, insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.employee import Employee, new_uuid
from app.models.leave import EmployeeLeave, EmployeeLeaveAllocation


async def create_leave(db: AsyncSession, values: dict[str, Any]) -> EmployeeLeave:
    leave = EmployeeLeave(**values)
    db.add(leave)
    await db.commit()
    await db.refresh(leave)
    return leave


async def get_leave(db: AsyncSession, leave_id: str) -> Optional[EmployeeLeave]:
    return await db.scalar(select(EmployeeLeave).where(EmployeeLeave.uuid == leave_id))


async def find_overlapping_leave(
    db: AsyncSession, employee_id: str, start: date, end: date, statuses: List[str]
) -> Optional[EmployeeLeave]:
    return await db.scalar(
        select(EmployeeLeave)
        .where(
            EmployeeLeave.employee_id == employee_id,
            EmployeeLeave.leave_approval_status.in_(statuses),
            EmployeeLeave.leave_start_date <= end,
            EmployeeLeave.leave_end_date >= start,
        )
        .limit(1)
    )


async def update_leave_status(
    db: AsyncSession, leave_id: str, approvers: List[Dict[str, Any]], status: str, updated_by: str
) -> int:
    result = await db.execute(
        update(EmployeeLeave)
        .where(EmployeeLeave.uuid == leave_id)
        .values(leave_approvers=approvers, leave_approval_status=status, updated_by=updated_by)
    )
    await db.commit()
    return result.rowcount or 0


async def list_employee_leaves(
    db: AsyncSession, employee_id: str, offset: int, limit: int
) -> Tuple[List[EmployeeLeave], int]:
    condition = EmployeeLeave.employee_id == employee_id
    total = await db.scalar(select(func.count()).select_from(EmployeeLeave).where(condition))
    result = await db.execute(
        select(EmployeeLeave).where(condition).order_by(EmployeeLeave.leave_start_date.desc()).offset(offset).limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def list_reportee_leaves(
    db: AsyncSession,
    approver_id: Optional[str],
    offset: int,
    limit: int,
) -> Tuple[List[Tuple[EmployeeLeave, str]], int]:
    """
    Leaves where `approver_id` is listed as an approver.

    With approver_id None every leave is returned (HR view).
    """
    conditions = []
    if approver_id is not None:
        conditions.append(
            cast(EmployeeLeave.leave_approvers, JSONB).contains([{"approver_id": approver_id}])
        )
        conditions.append(EmployeeLeave.employee_id != approver_id)

    total = await db.scalar(select(func.count()).select_from(EmployeeLeave).where(*conditions))
    result = await db.execute(
        select(EmployeeLeave, Employee.name)
        .join(Employee, Employee.uuid == EmployeeLeave.employee_id)
        .where(*conditions)
        .order_by(EmployeeLeave.requested_date.desc())
        .offset(offset)
        .limit(limit)
    )
    return [(row[0], row[1]) for row in result.all()], total or 0


async def get_allocations(db: AsyncSession, employee_id: str, year: str) -> List[EmployeeLeaveAllocation]:
    result = await db.execute(
        select(EmployeeLeaveAllocation)
        .where(EmployeeLeaveAllocation.employee_id == employee_id, EmployeeLeaveAllocation.year == year)
        .order_by(EmployeeLeaveAllocation.leave_type)
    )
    return list(result.scalars().all())


async def upsert_allocations(
    db: AsyncSession, employee_id: str, year: str, allocations: List[Dict[str, Any]], updated_by: str
) -> None:
    """Insert or overwrite allocated/carry-forwarded days per leave type; applied days are kept."""
    for item in allocations:
        stmt = pg_insert(EmployeeLeaveAllocation).values(
            uuid=new_uuid(),
            employee_id=employee_id,
            year=year,
            leave_type=item["leave_type"],
            leaves_applied=item.get("leaves_applied", 0),
            leaves_allocated=item["leaves_allocated"],
            leaves_carry_forwarded=item.get("leaves_carry_forwarded", 0),
            created_by=updated_by,
            updated_by=updated_by,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["employee_id", "year", "leave_type"],
            set_={
                "leaves_allocated": stmt.excluded.leaves_allocated,
                "leaves_carry_forwarded": stmt.excluded.leaves_carry_forwarded,
                "updated_by": updated_by,
            },
        )
        await db.execute(stmt)
    await db.commit()


async def add_applied_days(
    db: AsyncSession, employee_id: str, year: str, leave_type: str, days: float, updated_by: str
) -> int:
    """Adjust leaves_applied by `days` (negative to give days back)."""
    result = await db.execute(
        update(EmployeeLeaveAllocation)
        .where(
            EmployeeLeaveAllocation.employee_id == employee_id,
            EmployeeLeaveAllocation.year == year,
            EmployeeLeaveAllocation.leave_type == leave_type,
        )
        .values(leaves_applied=EmployeeLeaveAllocation.leaves_applied + days, updated_by=updated_by)
    )
    await db.commit()
    return result.rowcount or 0


async def list_employees_with_allocations(db: AsyncSession, year: str) -> List[str]:
    result = await db.execute(
        select(EmployeeLeaveAllocation.employee_id).where(EmployeeLeaveAllocation.year == year).distinct()
    )
    return list(result.scalars().all())


async def approved_days_by_type(db: AsyncSession, employee_id: str, start: date, end: date) -> Dict[str, float]:
    result = await db.execute(
        select(EmployeeLeave.leave_type, func.sum(EmployeeLeave.leave_days))
        .where(
            EmployeeLeave.employee_id == employee_id,
            EmployeeLeave.leave_approval_status == "APPROVED",
            or_(EmployeeLeave.leave_start_date.between(start, end), EmployeeLeave.leave_end_date.between(start, end)),
        )
        .group_by(EmployeeLeave.leave_type)
    )
    return {row[0]: float(row[1] or 0) for row in result.all()}

from datetime import date
from typing import Any, List, Optional, Tuple

from sqlalchemy import select, update, func, cast, Integer
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.employee import Employee, new_uuid
from app.models.timesheet import EmployeeTimesheet, EmployeeWeeklyTimesheet


# Daily

async def get_max_task_number(db: AsyncSession, employee_id: str) -> int:
    """Highest TASKnnn number used by the employee across daily and weekly timesheets."""
    highest = 0
    for model in (EmployeeTimesheet, EmployeeWeeklyTimesheet):
        value = await db.scalar(
            select(func.max(cast(func.substr(model.task_id, 5), Integer))).where(
                model.employee_id == employee_id,
                model.task_id.op("~")("^TASK[0-9]+$"),
            )
        )
        highest = max(highest, int(value or 0))
    return highest


async def find_daily_by_date(db: AsyncSession, employee_id: str, timesheet_date: date) -> Optional[EmployeeTimesheet]:
    return await db.scalar(
        select(EmployeeTimesheet).where(
            EmployeeTimesheet.employee_id == employee_id,
            EmployeeTimesheet.timesheet_date == timesheet_date,
        )
    )


async def create_daily_timesheet(db: AsyncSession, values: dict[str, Any]) -> EmployeeTimesheet:
    timesheet = EmployeeTimesheet(**values)
    db.add(timesheet)
    await db.commit()
    await db.refresh(timesheet)
    return timesheet


async def get_daily_timesheet(db: AsyncSession, timesheet_id: str) -> Optional[EmployeeTimesheet]:
    return await db.scalar(select(EmployeeTimesheet).where(EmployeeTimesheet.uuid == timesheet_id))


async def get_daily_timesheets(db: AsyncSession, timesheet_ids: List[str]) -> List[EmployeeTimesheet]:
    result = await db.execute(select(EmployeeTimesheet).where(EmployeeTimesheet.uuid.in_(timesheet_ids)))
    return list(result.scalars().all())


async def update_daily_timesheet(db: AsyncSession, timesheet_id: str, values: dict[str, Any]) -> int:
    result = await db.execute(
        update(EmployeeTimesheet).where(EmployeeTimesheet.uuid == timesheet_id).values(**values)
    )
    await db.commit()
    return result.rowcount or 0


async def update_daily_approval(
    db: AsyncSession, timesheet_id: str, status: str, approver_id: str, comment: Optional[str]
) -> int:
    result = await db.execute(
        update(EmployeeTimesheet)
        .where(EmployeeTimesheet.uuid == timesheet_id)
        .values(
            approval_status=status,
            approver_id=approver_id,
            approval_date=date.today(),
            approver_comments=comment,
            updated_by=approver_id,
        )
    )
    await db.commit()
    return result.rowcount or 0


async def list_daily_timesheets(
    db: AsyncSession,
    employee_ids: Optional[List[str]],
    offset: int,
    limit: int,
    status: Optional[str] = None,
    exclude_employee_id: Optional[str] = None,
) -> Tuple[List[Tuple[EmployeeTimesheet, str]], int]:
    """Daily timesheets for `employee_ids` (all employees when None)."""
    conditions = []
    if employee_ids is not None:
        conditions.append(EmployeeTimesheet.employee_id.in_(employee_ids))
    if exclude_employee_id:
        conditions.append(EmployeeTimesheet.employee_id != exclude_employee_id)
    if status:
        conditions.append(EmployeeTimesheet.approval_status == status)

    total = await db.scalar(select(func.count()).select_from(EmployeeTimesheet).where(*conditions))
    result = await db.execute(
        select(EmployeeTimesheet, Employee.name)
        .join(Employee, Employee.uuid == EmployeeTimesheet.employee_id)
        .where(*conditions)
        .order_by(EmployeeTimesheet.timesheet_date.desc())
        .offset(offset)
        .limit(limit)
    )
    return [(row[0], row[1]) for row in result.all()], total or 0


async def list_daily_for_date(db: AsyncSession, timesheet_date: date) -> List[EmployeeTimesheet]:
    result = await db.execute(select(EmployeeTimesheet).where(EmployeeTimesheet.timesheet_date == timesheet_date))
    return list(result.scalars().all())


# Weekly

async def find_weekly_by_start(db: AsyncSession, employee_id: str, week_start: date) -> Optional[EmployeeWeeklyTimesheet]:
    return await db.scalar(
        select(EmployeeWeeklyTimesheet).where(
            EmployeeWeeklyTimesheet.employee_id == employee_id,
            EmployeeWeeklyTimesheet.week_start_date == week_start,
        )
    )


async def create_weekly_timesheet(db: AsyncSession, values: dict[str, Any]) -> EmployeeWeeklyTimesheet:
    timesheet = EmployeeWeeklyTimesheet(**values)
    db.add(timesheet)
    await db.commit()
    await db.refresh(timesheet)
    return timesheet


async def get_weekly_timesheet(db: AsyncSession, timesheet_id: str) -> Optional[EmployeeWeeklyTimesheet]:
    return await db.scalar(select(EmployeeWeeklyTimesheet).where(EmployeeWeeklyTimesheet.uuid == timesheet_id))


async def update_weekly_timesheet(db: AsyncSession, timesheet_id: str, values: dict[str, Any]) -> int:
    result = await db.execute(
        update(EmployeeWeeklyTimesheet).where(EmployeeWeeklyTimesheet.uuid == timesheet_id).values(**values)
    )
    await db.commit()
    return result.rowcount or 0


async def list_weekly_timesheets(
    db: AsyncSession, employee_ids: Optional[List[str]], offset: int, limit: int
) -> Tuple[List[Tuple[EmployeeWeeklyTimesheet, str]], int]:
    conditions = []
    if employee_ids is not None:
        conditions.append(EmployeeWeeklyTimesheet.employee_id.in_(employee_ids))

    total = await db.scalar(select(func.count()).select_from(EmployeeWeeklyTimesheet).where(*conditions))
    result = await db.execute(
        select(EmployeeWeeklyTimesheet, Employee.name)
        .join(Employee, Employee.uuid == EmployeeWeeklyTimesheet.employee_id)
        .where(*conditions)
        .order_by(EmployeeWeeklyTimesheet.week_start_date.desc())
        .offset(offset)
        .limit(limit)
    )
    return [(row[0], row[1]) for row in result.all()], total or 0


async def upsert_weekly_from_daily(db: AsyncSession, values: dict[str, Any]) -> None:
    """Insert or refresh the weekly row keyed by (employee_id, week_start_date)."""
    stmt = pg_insert(EmployeeWeeklyTimesheet).values(uuid=new_uuid(), **values)
    stmt = stmt.on_conflict_do_update(
        index_elements=["employee_id", "week_start_date"],
        set_={
            key: getattr(stmt.excluded, key)
            for key in (
                "task_details",
                "total_hours",
                "approval_status",
                "approver_id",
                "approval_date",
                "approver_comments",
                "updated_by",
            )
        },
    )
    await db.execute(stmt)
    await db.commit()

"""
Daily job copying today's daily timesheets into the weekly table.

Each daily row is upserted into the weekly row of its Monday-to-Sunday week
with status SAVED; a failing row is logged and skipped.
"""

import logging
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.roles import TimesheetWorkflowStatus
from app.db.session import AsyncSessionLocal
from app.services.timesheets.helpers import week_boundaries
from app.stores import timesheet_store

logger = logging.getLogger("vodichron.jobs.timesheet_sync")


def _today() -> date:
    return datetime.now(ZoneInfo(settings.CRON_TIMEZONE)).date()


async def sync_daily_timesheets_to_weekly(day: Optional[date] = None) -> int:
    """Returns the number of daily timesheets synced."""
    day = day or _today()
    week_start, week_end = week_boundaries(day)

    async with AsyncSessionLocal() as db:
        daily = await timesheet_store.list_daily_for_date(db, day)
        if not daily:
            logger.info(f"No daily timesheets for {day.isoformat()}, nothing to sync")
            return 0

        # Rollback expires loaded rows, so copy the values out first
        rows = [
            (timesheet.uuid, {
                "employee_id": timesheet.employee_id,
                "request_number": timesheet.request_number,
                "week_start_date": week_start,
                "week_end_date": week_end,
                "task_details": timesheet.task_details,
                "total_hours": timesheet.total_hours,
                "task_id": timesheet.task_id,
                "approval_status": timesheet.approval_status,
                "approver_id": timesheet.approver_id,
                "approval_date": timesheet.approval_date,
                "approver_comments": timesheet.approver_comments,
                "time_sheet_status": TimesheetWorkflowStatus.SAVED.value,
                "created_by": timesheet.created_by,
                "updated_by": timesheet.updated_by,
            })
            for timesheet in daily
        ]

        synced = 0
        for timesheet_uuid, values in rows:
            try:
                await timesheet_store.upsert_weekly_from_daily(db, values)
                synced += 1
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(f"Failed to sync daily timesheet {timesheet_uuid}: {e}")

    logger.info(f"Synced {synced}/{len(daily)} daily timesheets into week {week_start} - {week_end}")
    return synced

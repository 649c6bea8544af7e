# Timesheet services
from app.services.timesheets import daily_service, weekly_service
from app.services.timesheets.timesheet_sync import sync_daily_timesheets_to_weekly

__all__ = ["daily_service", "weekly_service", "sync_daily_timesheets_to_weekly"]

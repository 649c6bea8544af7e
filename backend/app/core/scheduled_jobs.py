"""
Background jobs run as asyncio loops inside the API process.

There is no coordination between instances: every process that starts the
scheduler runs every enabled job.
"""

import asyncio
import logging
from datetime import datetime, time, timedelta
from typing import Awaitable, Callable, List, Optional
from zoneinfo import ZoneInfo

from app.core.config import settings

logger = logging.getLogger("vodichron.jobs")

JobFunc = Callable[[], Awaitable[object]]


def seconds_until(run_at: time, tz: ZoneInfo, now: Optional[datetime] = None) -> float:
    """Seconds from `now` until the next `run_at` wall-clock time in `tz`."""
    now = now.astimezone(tz) if now else datetime.now(tz)
    target = datetime.combine(now.date(), run_at, tzinfo=tz)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class ScheduledJob:
    """
    A job that runs either every `interval_seconds` or once a day at `daily_at`.

        job = ScheduledJob("session_cleanup", cleanup.run, interval_seconds=1800)
        job.start()
    """

    def __init__(
        self,
        name: str,
        func: JobFunc,
        interval_seconds: Optional[int] = None,
        daily_at: Optional[time] = None,
        timezone: Optional[str] = None,
    ):
        if interval_seconds is None and daily_at is None:
            raise ValueError(f"Job {name} needs an interval or a daily run time")
        self.name = name
        self.func = func
        self.interval_seconds = interval_seconds
        self.daily_at = daily_at
        self.tz = ZoneInfo(timezone or settings.CRON_TIMEZONE)
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    def next_delay(self, now: Optional[datetime] = None) -> float:
        if self.daily_at is not None:
            return seconds_until(self.daily_at, self.tz, now)
        return float(self.interval_seconds)

    @property
    def description(self) -> str:
        if self.daily_at is not None:
            return f"daily at {self.daily_at.strftime('%H:%M')} {self.tz.key}"
        return f"every {self.interval_seconds // 60} minutes"

    async def run_once(self) -> None:
        started = datetime.utcnow()
        try:
            result = await self.func()
            elapsed = (datetime.utcnow() - started).total_seconds()
            logger.info(f"Job {self.name} finished in {elapsed:.2f}s: {result}")
        except Exception as e:
            logger.error(f"Job {self.name} failed: {e}", exc_info=True)

    def start(self) -> Optional[asyncio.Task]:
        if self._running:
            logger.warning(f"Job {self.name} already running")
            return self._task

        async def job_loop():
            self._running = True
            while self._running:
                await asyncio.sleep(self.next_delay())
                await self.run_once()

        self._task = asyncio.create_task(job_loop(), name=f"job:{self.name}")
        logger.info(f"Job {self.name} scheduled {self.description}")
        return self._task

    def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None
        logger.info(f"Job {self.name} stopped")


class JobScheduler:
    def __init__(self):
        self.jobs: List[ScheduledJob] = []

    def add(self, job: ScheduledJob) -> ScheduledJob:
        self.jobs.append(job)
        return job

    def start(self) -> List[asyncio.Task]:
        tasks = []
        for job in self.jobs:
            task = job.start()
            if task is not None:
                tasks.append(task)
        return tasks

    def stop(self) -> None:
        for job in self.jobs:
            job.stop()


def build_scheduler() -> JobScheduler:
    """Scheduler holding every job enabled in settings."""
    from app.services.auth.session_cleanup import SessionCleanupService
    from app.services.maintenance.backup_service import DatabaseBackupService
    from app.services.timesheets.timesheet_sync import sync_daily_timesheets_to_weekly

    scheduler = JobScheduler()

    if settings.SESSION_CLEANUP_ENABLED:
        scheduler.add(ScheduledJob(
            "session_cleanup",
            SessionCleanupService().run,
            interval_seconds=settings.SESSION_CLEANUP_INTERVAL_MINUTES * 60,
        ))

    if settings.BACKUP_ENABLED:
        scheduler.add(ScheduledJob(
            "database_backup",
            DatabaseBackupService().run,
            interval_seconds=settings.BACKUP_INTERVAL_MINUTES * 60,
        ))

    if settings.TIMESHEET_SYNC_ENABLED:
        scheduler.add(ScheduledJob(
            "timesheet_sync",
            sync_daily_timesheets_to_weekly,
            daily_at=time(23, 59),
        ))

    return scheduler

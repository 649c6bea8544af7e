"""
Periodic session cleanup.

Employees whose sessions have all expired or been revoked are marked
OFFLINE. Sessions revoked before the retention cutoff are optionally deleted.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.db.session import AsyncSessionLocal
from app.stores import auth_store

logger = logging.getLogger("vodichron.jobs.session_cleanup")


class SessionCleanupService:
    """Marks employees without a live session offline and prunes revoked sessions."""

    def __init__(
        self,
        delete_revoked: Optional[bool] = None,
        retention_days: Optional[int] = None,
    ):
        self.delete_revoked = settings.SESSION_DELETE_REVOKED if delete_revoked is None else delete_revoked
        self.retention_days = retention_days or settings.SESSION_RETENTION_DAYS

    async def mark_offline(self, db, now: datetime) -> int:
        employee_ids = await auth_store.find_employees_without_active_sessions(db, now)
        if not employee_ids:
            return 0
        updated = await auth_store.set_offline_bulk(db, employee_ids)
        logger.info(f"Marked {updated} employee(s) OFFLINE after session expiry")
        return updated

    async def delete_old_revoked(self, db, now: datetime) -> int:
        cutoff = now - timedelta(days=self.retention_days)
        deleted = await auth_store.delete_revoked_sessions_before(db, cutoff)
        if deleted:
            logger.info(f"Deleted {deleted} session(s) revoked before {cutoff.date().isoformat()}")
        return deleted

    async def run(self) -> dict:
        """Run one cleanup pass."""
        now = datetime.utcnow()
        results = {"marked_offline": 0, "deleted_sessions": 0, "success": True}

        async with AsyncSessionLocal() as db:
            try:
                results["marked_offline"] = await self.mark_offline(db, now)
                if self.delete_revoked:
                    results["deleted_sessions"] = await self.delete_old_revoked(db, now)
            except SQLAlchemyError as e:
                logger.error(f"Session cleanup failed: {e}")
                await db.rollback()
                results["success"] = False
                results["error"] = str(e)

        return results

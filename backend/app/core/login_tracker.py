"""
Failed-login tracking for brute-force protection.

State lives in process memory; each API instance keeps its own counters.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional

from app.core.config import settings

logger = logging.getLogger("vodichron.login_tracker")


class LoginTracker:
    """Sliding-window failure counter with a temporary lock per login key."""

    def __init__(
        self,
        max_attempts: Optional[int] = None,
        lockout_minutes: Optional[int] = None,
        window_minutes: Optional[int] = None,
    ):
        self.max_attempts = max_attempts or settings.LOGIN_MAX_ATTEMPTS
        self.lockout = timedelta(minutes=lockout_minutes or settings.LOGIN_LOCKOUT_MINUTES)
        self.window = timedelta(minutes=window_minutes or settings.LOGIN_ATTEMPT_WINDOW_MINUTES)
        self._attempts: dict[str, list[datetime]] = {}
        self._locked_until: dict[str, datetime] = {}
        self._lock = asyncio.Lock()

    def _prune(self, key: str, now: datetime) -> None:
        cutoff = now - self.window
        if key in self._attempts:
            self._attempts[key] = [ts for ts in self._attempts[key] if ts >= cutoff]

    async def record_failure(self, key: str) -> int:
        """Record a failed attempt, locking the key once the limit is hit. Returns the attempt count."""
        async with self._lock:
            now = datetime.utcnow()
            self._prune(key, now)
            attempts = self._attempts.setdefault(key, [])
            attempts.append(now)
            if len(attempts) >= self.max_attempts:
                self._locked_until[key] = now + self.lockout
                logger.warning(f"Login locked for {key} after {len(attempts)} failed attempts")
            return len(attempts)

    async def is_locked(self, key: str) -> tuple[bool, int]:
        """Returns (is_locked, remaining_seconds)."""
        async with self._lock:
            now = datetime.utcnow()
            locked_until = self._locked_until.get(key)
            if locked_until and locked_until > now:
                return True, int((locked_until - now).total_seconds())
            if locked_until:
                self._locked_until.pop(key, None)
                self._attempts.pop(key, None)
            return False, 0

    async def reset(self, key: str) -> None:
        async with self._lock:
            self._attempts.pop(key, None)
            self._locked_until.pop(key, None)


_login_tracker: Optional[LoginTracker] = None


def get_login_tracker() -> LoginTracker:
    """Get the global login tracker instance."""
    global _login_tracker
    if _login_tracker is None:
        _login_tracker = LoginTracker()
    return _login_tracker

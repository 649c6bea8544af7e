"""
Database backups with pg_dump.

One file per day (database_backup_YYYY-MM-DD.sql), overwritten on every run
that day; with BACKUP_ENCRYPT the dump is Fernet-encrypted and written as
.sql.enc. Files older than BACKUP_RETENTION_DAYS are removed after each run.
"""

import asyncio
import logging
import os
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import List, Optional

from sqlalchemy.engine import make_url

from app.core.config import settings
from app.core.encryption import get_encryptor

logger = logging.getLogger("vodichron.jobs.backup")

BACKUP_PREFIX = "database_backup_"


class BackupError(Exception):
    """Raised when pg_dump fails."""


class DatabaseBackupService:
    def __init__(
        self,
        backup_dir: Optional[str] = None,
        retention_days: Optional[int] = None,
        encrypt: Optional[bool] = None,
    ):
        self.backup_dir = Path(backup_dir or settings.BACKUP_DIR)
        self.retention_days = retention_days or settings.BACKUP_RETENTION_DAYS
        self.encrypt = settings.BACKUP_ENCRYPT if encrypt is None else encrypt

    def backup_filename(self, day: Optional[date] = None) -> str:
        day = day or date.today()
        suffix = ".sql.enc" if self.encrypt else ".sql"
        return f"{BACKUP_PREFIX}{day.isoformat()}{suffix}"

    def _pg_dump_command(self) -> tuple[List[str], dict]:
        url = make_url(settings.DATABASE_URL)
        command = [
            settings.PG_DUMP_PATH,
            "--host", url.host or "localhost",
            "--port", str(url.port or 5432),
            "--username", url.username or "postgres",
            "--no-owner",
            "--format", "plain",
            url.database or settings.POSTGRES_DB,
        ]
        env = dict(os.environ)
        if url.password:
            env["PGPASSWORD"] = str(url.password)
        return command, env

    async def dump(self) -> bytes:
        command, env = self._pg_dump_command()
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
        )
        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            raise BackupError(f"pg_dump exited with {process.returncode}: {stderr.decode(errors='replace').strip()}")
        return stdout

    async def create_backup(self) -> Path:
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        data = await self.dump()
        if self.encrypt:
            data = get_encryptor().encrypt_bytes(data)

        path = self.backup_dir / self.backup_filename()
        path.write_bytes(data)
        logger.info(f"Backup written to {path} ({len(data) / 1024:.1f} KB)")
        return path

    def cleanup_old_backups(self, now: Optional[datetime] = None) -> int:
        if not self.backup_dir.exists():
            return 0
        cutoff = (now or datetime.now()) - timedelta(days=self.retention_days)
        deleted = 0
        for file_path in self.backup_dir.glob(f"{BACKUP_PREFIX}*"):
            if not file_path.is_file():
                continue
            if datetime.fromtimestamp(file_path.stat().st_mtime) < cutoff:
                try:
                    file_path.unlink()
                    deleted += 1
                except OSError as e:
                    logger.warning(f"Could not delete old backup {file_path}: {e}")
        if deleted:
            logger.info(f"Deleted {deleted} backup(s) older than {self.retention_days} days")
        return deleted

    async def run(self) -> dict:
        results = {"file": None, "deleted": 0, "success": True}
        try:
            results["file"] = str(await self.create_backup())
        except (BackupError, OSError) as e:
            logger.error(f"Database backup failed: {e}")
            results["success"] = False
            results["error"] = str(e)
        results["deleted"] = self.cleanup_old_backups()
        return results

# Maintenance jobs
from app.services.maintenance.backup_service import DatabaseBackupService, BackupError

__all__ = ["DatabaseBackupService", "BackupError"]

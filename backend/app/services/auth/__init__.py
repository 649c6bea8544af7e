# Authentication services
from app.services.auth import auth_service, password_reset_service
from app.services.auth.session_cleanup import SessionCleanupService

__all__ = ["auth_service", "password_reset_service", "SessionCleanupService"]

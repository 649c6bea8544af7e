# Notification Services Package
# SMTP delivery and HTML templates

from app.services.notifications.email_service import EmailService, BulkSendResult, get_email_service
from app.services.notifications import email_templates

__all__ = [
    "EmailService",
    "BulkSendResult",
    "get_email_service",
    "email_templates",
]

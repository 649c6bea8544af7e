"""
Self-service password reset.

A reset request stores a Fernet-encrypted random token for the email; the
encrypted token travels in the emailed link and is valid for
RESET_LINK_EXPIRE_MINUTES. A successful reset deletes every request for the
email, so a link can only be used once.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import quote

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.encryption import get_encryptor
from app.core.errors import BadRequestError, InternalServerError
from app.core.roles import RecordStatus
from app.core.security import generate_random_string, get_password_hash
from app.models.password_reset import PasswordResetRequest
from app.services.notifications import email_templates, get_email_service
from app.stores import auth_store, password_reset_store

logger = logging.getLogger("vodichron.auth.password_reset")

DEACTIVATED_ACCOUNT = "Your account is in deactivated state, contact HR to activate the account."
EXPIRED_LINK = "Looks like your reset link is expired."
INVALID_REQUEST = "Invalid reset request."


async def _find_active_account(db: AsyncSession, email: str):
    """
    Returns ("employee", employee) or ("customer", customer), None when the
    email is unknown. Raises BadRequestError for a deactivated account.
    """
    employee = await auth_store.find_employee_by_official_email(db, email)
    if employee is not None:
        user = await auth_store.find_user_by_employee_id(db, employee.uuid)
        if user is None or user.status != RecordStatus.ACTIVE.value:
            logger.warning(f"Password reset for inactive employee account {email}")
            raise BadRequestError(DEACTIVATED_ACCOUNT)
        return "employee", employee

    customer = await auth_store.find_customer_by_email(db, email)
    if customer is not None:
        access = await auth_store.find_customer_access(db, customer.uuid)
        if access is None or access.status != RecordStatus.ACTIVE.value:
            logger.warning(f"Password reset for inactive customer account {email}")
            raise BadRequestError(DEACTIVATED_ACCOUNT)
        return "customer", customer

    return None


def _is_expired(request: PasswordResetRequest, now: Optional[datetime] = None) -> bool:
    created_at = request.created_at
    if created_at is None:
        return True
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return now - created_at > timedelta(minutes=settings.RESET_LINK_EXPIRE_MINUTES)


async def _find_live_request(db: AsyncSession, token: str) -> Optional[PasswordResetRequest]:
    request = await password_reset_store.find_reset_request(db, token)
    if request is None or _is_expired(request):
        return None
    return request


async def generate_reset_link(db: AsyncSession, email: str) -> bool:
    """
    Email a reset link to an active account.

    Unknown emails succeed silently so the endpoint cannot be used to probe
    for accounts.
    """
    account = await _find_active_account(db, email)
    if account is None:
        logger.info(f"Password reset requested for unknown email {email}")
        return True

    subject_type, subject = account
    token = get_encryptor().encrypt(generate_random_string(6))

    await password_reset_store.delete_reset_requests(db, email)
    await password_reset_store.create_reset_request(db, email, token)

    reset_link = f"{settings.FRONTEND_URL}/reset-password/{generate_random_string(10)}/{quote(token, safe='')}"
    subject_line, html = email_templates.reset_password_email(
        subject.name, reset_link, settings.RESET_LINK_EXPIRE_MINUTES
    )
    await get_email_service().send_email(email, subject_line, html)

    logger.info(f"Password reset link generated for {subject_type} {subject.uuid}")
    return True


async def validate_reset_link(db: AsyncSession, token: str) -> Optional[dict]:
    """Returns {"email": ...} while the link is still valid, None otherwise."""
    request = await _find_live_request(db, token)
    if request is None:
        return None
    return {"email": request.email}


async def reset_password(db: AsyncSession, token: str, email: str, password: str) -> bool:
    request = await _find_live_request(db, token)
    if request is None:
        raise BadRequestError(EXPIRED_LINK)
    if request.email != email:
        logger.warning(f"Password reset email mismatch for token issued to {request.email}")
        raise BadRequestError(INVALID_REQUEST)

    account = await _find_active_account(db, email)
    if account is None:
        raise BadRequestError("User not found.")
    subject_type, subject = account

    password_hash = get_password_hash(password)
    if subject_type == "employee":
        updated = await password_reset_store.update_user_password(db, subject.uuid, password_hash)
    else:
        updated = await password_reset_store.update_customer_password(db, subject.uuid, password_hash)
    if not updated:
        logger.error(f"Password update affected no rows for {subject_type} {subject.uuid}")
        raise InternalServerError("Failed to update password.")

    await password_reset_store.delete_reset_requests(db, email)
    logger.info(f"Password reset completed for {subject_type} {subject.uuid}")
    return True

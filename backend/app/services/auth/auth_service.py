"""
Login, session extension and logout.

Employees authenticate with their official email and application-user
password; customers with their customer email and app-access password. Each
login creates a session row holding the SHA-256 hash of the refresh token
sent in the cookie; extending a session rotates that token.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import UnauthorizedError, TooManyRequestsError
from app.core.login_tracker import get_login_tracker
from app.core.roles import OnlineStatus, RecordStatus, Role, SubjectType
from app.core.security import (
    compare_passwords,
    create_access_token,
    create_refresh_token,
    get_refresh_token_expire_time,
    hash_refresh_token,
)
from app.schemas.auth import ExtendSessionResponse, LoginResponse, SubjectInfo
from app.stores import auth_store, customer_store, employee_store

logger = logging.getLogger("vodichron.auth")

INVALID_CREDENTIALS = "Incorrect email or password."
MISSING_REFRESH_TOKEN = "Missing refresh token"
INVALID_REFRESH_TOKEN = "Invalid or expired refresh token"


@dataclass
class IssuedSession:
    """Access token response plus the raw refresh token for the cookie."""
    response: LoginResponse
    refresh_token: str


def _login_key(email: str, ip_address: Optional[str]) -> str:
    return f"{email.lower()}::{ip_address or 'unknown'}"


def _issue_access_token(subject: SubjectInfo) -> str:
    return create_access_token(
        subject.id,
        claims={"role": subject.role, "email": subject.email, "type": subject.type},
    )


async def _authenticate_employee(db: AsyncSession, email: str, password: str) -> Optional[SubjectInfo]:
    employee = await auth_store.find_employee_by_official_email(db, email)
    if employee is None:
        return None
    user = await auth_store.find_user_by_employee_id(db, employee.uuid)
    if user is None or user.status != RecordStatus.ACTIVE.value:
        return None
    if not compare_passwords(password, user.password):
        return None

    await auth_store.update_user_last_login(db, employee.uuid)
    await auth_store.set_online_status(db, employee.uuid, OnlineStatus.ONLINE.value)
    return SubjectInfo(id=employee.uuid, type=SubjectType.EMPLOYEE.value, role=user.role, email=employee.official_email)


async def _authenticate_customer(db: AsyncSession, email: str, password: str) -> Optional[SubjectInfo]:
    customer = await auth_store.find_customer_by_email(db, email)
    if customer is None:
        return None
    access = await auth_store.find_customer_access(db, customer.uuid)
    if access is None or access.status != RecordStatus.ACTIVE.value:
        return None
    if not compare_passwords(password, access.password):
        return None

    await auth_store.update_customer_last_login(db, customer.uuid)
    return SubjectInfo(id=customer.uuid, type=SubjectType.CUSTOMER.value, role=Role.CUSTOMER.value, email=customer.email)


async def login(
    db: AsyncSession,
    email: str,
    password: str,
    user_agent: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> IssuedSession:
    """
    Authenticate an employee (official email) or, failing that, a customer.

    Raises:
        TooManyRequestsError: the email/IP pair is locked out
        UnauthorizedError: the credentials do not match an active account
    """
    tracker = get_login_tracker()
    key = _login_key(email, ip_address)
    locked, remaining_seconds = await tracker.is_locked(key)
    if locked:
        remaining_minutes = (remaining_seconds // 60) + 1
        raise TooManyRequestsError(f"Too many login attempts. Try again in {remaining_minutes} minutes.")

    subject = await _authenticate_employee(db, email, password)
    if subject is None:
        subject = await _authenticate_customer(db, email, password)

    if subject is None:
        attempts = await tracker.record_failure(key)
        logger.warning(f"Failed login for {email} from {ip_address} (attempt {attempts})")
        raise UnauthorizedError(INVALID_CREDENTIALS)

    await tracker.reset(key)

    raw_token, token_hash = create_refresh_token()
    await auth_store.create_session(
        db,
        subject_id=subject.id,
        subject_type=subject.type,
        token_hash=token_hash,
        expires_at=get_refresh_token_expire_time(),
        user_agent=(user_agent or "")[:255] or None,
        ip_address=ip_address,
    )

    logger.info(f"{subject.type} {subject.id} logged in with role {subject.role}")
    return IssuedSession(
        response=LoginResponse(
            token=_issue_access_token(subject),
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            subject=subject,
        ),
        refresh_token=raw_token,
    )


async def _resolve_subject(db: AsyncSession, subject_id: str, subject_type: str) -> Optional[SubjectInfo]:
    if subject_type == SubjectType.CUSTOMER.value:
        customer = await customer_store.get_customer(db, subject_id)
        access = await auth_store.find_customer_access(db, subject_id)
        if customer is None or access is None or access.status != RecordStatus.ACTIVE.value:
            return None
        return SubjectInfo(id=customer.uuid, type=subject_type, role=Role.CUSTOMER.value, email=customer.email)

    employee = await employee_store.get_employee(db, subject_id)
    user = await auth_store.find_user_by_employee_id(db, subject_id)
    if employee is None or user is None or user.status != RecordStatus.ACTIVE.value:
        return None
    return SubjectInfo(id=employee.uuid, type=subject_type, role=user.role, email=employee.official_email)


async def extend_session(db: AsyncSession, refresh_token: Optional[str]) -> IssuedSession:
    """Issue a new access token and rotate the refresh token of a live session."""
    if not refresh_token:
        raise UnauthorizedError(MISSING_REFRESH_TOKEN)

    session = await auth_store.find_session_by_hash(db, hash_refresh_token(refresh_token))
    if session is None or not session.is_valid():
        raise UnauthorizedError(INVALID_REFRESH_TOKEN)

    subject = await _resolve_subject(db, session.subject_id, session.subject_type)
    if subject is None:
        raise UnauthorizedError(INVALID_REFRESH_TOKEN)

    raw_token, token_hash = create_refresh_token()
    await auth_store.rotate_session(db, session.uuid, token_hash, get_refresh_token_expire_time())

    token = _issue_access_token(subject)
    return IssuedSession(
        response=LoginResponse(
            token=token,
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            subject=subject,
        ),
        refresh_token=raw_token,
    )


def to_extend_response(issued: IssuedSession) -> ExtendSessionResponse:
    return ExtendSessionResponse(token=issued.response.token, expires_in=issued.response.expires_in)


async def logout(db: AsyncSession, refresh_token: Optional[str]) -> None:
    """Revoke the session behind the cookie and mark the employee offline. Never fails."""
    if not refresh_token:
        return
    session = await auth_store.revoke_session_by_hash(db, hash_refresh_token(refresh_token))
    if session is None:
        return
    if session.subject_type == SubjectType.EMPLOYEE.value:
        await auth_store.set_online_status(db, session.subject_id, OnlineStatus.OFFLINE.value)
    logger.info(f"{session.subject_type} {session.subject_id} logged out at {datetime.utcnow().isoformat()}")

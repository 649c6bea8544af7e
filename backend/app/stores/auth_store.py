"""
Queries backing login, session rotation and logout.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update, delete, and_, exists
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.customer import Customer, CustomerAppAccess
from app.models.employee import Employee, EmployeeOnlineStatus, new_uuid
from app.models.session import Session
from app.models.user import ApplicationUser


async def find_employee_by_official_email(db: AsyncSession, email: str) -> Optional[Employee]:
    return await db.scalar(select(Employee).where(Employee.official_email == email))


async def find_user_by_employee_id(db: AsyncSession, employee_id: str) -> Optional[ApplicationUser]:
    return await db.scalar(select(ApplicationUser).where(ApplicationUser.employee_id == employee_id))


async def find_customer_by_email(db: AsyncSession, email: str) -> Optional[Customer]:
    return await db.scalar(select(Customer).where(Customer.email == email))


async def find_customer_access(db: AsyncSession, customer_id: str) -> Optional[CustomerAppAccess]:
    return await db.scalar(select(CustomerAppAccess).where(CustomerAppAccess.customer_id == customer_id))


async def update_user_last_login(db: AsyncSession, employee_id: str) -> None:
    await db.execute(
        update(ApplicationUser)
        .where(ApplicationUser.employee_id == employee_id)
        .values(last_login=datetime.utcnow())
    )
    await db.commit()


async def update_customer_last_login(db: AsyncSession, customer_id: str) -> None:
    await db.execute(
        update(CustomerAppAccess)
        .where(CustomerAppAccess.customer_id == customer_id)
        .values(last_login=datetime.utcnow())
    )
    await db.commit()


async def set_online_status(db: AsyncSession, employee_id: str, status: str) -> None:
    stmt = pg_insert(EmployeeOnlineStatus).values(
        uuid=new_uuid(),
        employee_id=employee_id,
        online_status=status,
        updated_at=datetime.utcnow(),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[EmployeeOnlineStatus.employee_id],
        set_={"online_status": status, "updated_at": datetime.utcnow()},
    )
    await db.execute(stmt)
    await db.commit()


async def set_offline_bulk(db: AsyncSession, employee_ids: List[str]) -> int:
    if not employee_ids:
        return 0
    result = await db.execute(
        update(EmployeeOnlineStatus)
        .where(EmployeeOnlineStatus.employee_id.in_(employee_ids))
        .values(online_status="OFFLINE", updated_at=datetime.utcnow())
    )
    await db.commit()
    return result.rowcount or 0


async def create_session(
    db: AsyncSession,
    subject_id: str,
    subject_type: str,
    token_hash: str,
    expires_at: datetime,
    user_agent: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> Session:
    session = Session(
        subject_id=subject_id,
        subject_type=subject_type,
        token_hash=token_hash,
        expires_at=expires_at,
        user_agent=user_agent,
        ip_address=ip_address,
    )
    db.add(session)
    await db.commit()
    await db.refresh(session)
    return session


async def find_session_by_hash(db: AsyncSession, token_hash: str) -> Optional[Session]:
    return await db.scalar(select(Session).where(Session.token_hash == token_hash))


async def rotate_session(db: AsyncSession, session_uuid: str, new_hash: str, expires_at: datetime) -> None:
    await db.execute(
        update(Session)
        .where(Session.uuid == session_uuid)
        .values(token_hash=new_hash, expires_at=expires_at)
    )
    await db.commit()


async def revoke_session_by_hash(db: AsyncSession, token_hash: str) -> Optional[Session]:
    session = await find_session_by_hash(db, token_hash)
    if session is None:
        return None
    if session.revoked_at is None:
        session.revoked_at = datetime.utcnow()
        await db.commit()
    return session


async def find_employees_without_active_sessions(db: AsyncSession, now: datetime) -> List[str]:
    """Employees that have stale (expired, unrevoked) sessions and no live session left."""
    active_session = exists().where(
        and_(
            Session.subject_type == "employee",
            Session.revoked_at.is_(None),
            Session.expires_at > now,
            Session.subject_id == EmployeeOnlineStatus.employee_id,
        )
    )
    stale_session = exists().where(
        and_(
            Session.subject_type == "employee",
            Session.revoked_at.is_(None),
            Session.expires_at <= now,
            Session.subject_id == EmployeeOnlineStatus.employee_id,
        )
    )
    result = await db.execute(
        select(EmployeeOnlineStatus.employee_id).where(
            EmployeeOnlineStatus.online_status != "OFFLINE",
            stale_session,
            ~active_session,
        )
    )
    return list(result.scalars().all())


async def delete_revoked_sessions_before(db: AsyncSession, cutoff: datetime) -> int:
    result = await db.execute(
        delete(Session).where(Session.revoked_at.isnot(None), Session.revoked_at < cutoff)
    )
    await db.commit()
    return result.rowcount or 0

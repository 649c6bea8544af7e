from datetime import datetime
from typing import Optional

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.customer import CustomerAppAccess
from app.models.password_reset import PasswordResetRequest
from app.models.user import ApplicationUser


async def delete_reset_requests(db: AsyncSession, email: str) -> int:
    result = await db.execute(delete(PasswordResetRequest).where(PasswordResetRequest.email == email))
    await db.commit()
    return result.rowcount or 0


async def create_reset_request(db: AsyncSession, email: str, token: str) -> PasswordResetRequest:
    request = PasswordResetRequest(email=email, token=token)
    db.add(request)
    await db.commit()
    await db.refresh(request)
    return request


async def find_reset_request(db: AsyncSession, token: str) -> Optional[PasswordResetRequest]:
    return await db.scalar(
        select(PasswordResetRequest)
        .where(PasswordResetRequest.token == token)
        .order_by(PasswordResetRequest.created_at.desc())
        .limit(1)
    )


async def update_user_password(db: AsyncSession, employee_id: str, password_hash: str) -> int:
    result = await db.execute(
        update(ApplicationUser)
        .where(ApplicationUser.employee_id == employee_id)
        .values(
            password=password_hash,
            password_update_timestamp=datetime.utcnow(),
            is_system_generated=False,
        )
    )
    await db.commit()
    return result.rowcount or 0


async def update_customer_password(db: AsyncSession, customer_id: str, password_hash: str) -> int:
    result = await db.execute(
        update(CustomerAppAccess)
        .where(CustomerAppAccess.customer_id == customer_id)
        .values(
            password=password_hash,
            password_update_timestamp=datetime.utcnow(),
            is_system_generated=False,
        )
    )
    await db.commit()
    return result.rowcount or 0

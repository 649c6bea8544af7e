from typing import Any, List, Optional, Tuple

from sqlalchemy import select, update, delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.customer import Customer


async def get_customer(db: AsyncSession, customer_id: str) -> Optional[Customer]:
    return await db.scalar(select(Customer).where(Customer.uuid == customer_id))


async def find_customer_by_email(db: AsyncSession, email: str) -> Optional[Customer]:
    return await db.scalar(select(Customer).where(Customer.email == email))


async def create_customer(db: AsyncSession, values: dict[str, Any]) -> Customer:
    customer = Customer(**values)
    db.add(customer)
    await db.commit()
    await db.refresh(customer)
    return customer


async def update_customer(db: AsyncSession, customer_id: str, values: dict[str, Any]) -> int:
    result = await db.execute(update(Customer).where(Customer.uuid == customer_id).values(**values))
    await db.commit()
    return result.rowcount or 0


async def delete_customer(db: AsyncSession, customer_id: str) -> int:
    result = await db.execute(delete(Customer).where(Customer.uuid == customer_id))
    await db.commit()
    return result.rowcount or 0


async def list_customers(db: AsyncSession, offset: int, limit: int) -> Tuple[List[Customer], int]:
    total = await db.scalar(select(func.count()).select_from(Customer))
    result = await db.execute(select(Customer).order_by(Customer.name).offset(offset).limit(limit))
    return list(result.scalars().all()), total or 0


async def search_customers(db: AsyncSession, keyword: str, limit: int = 20) -> List[Customer]:
    pattern = f"%{keyword}%"
    result = await db.execute(
        select(Customer)
        .where(or_(Customer.name.ilike(pattern), Customer.email.ilike(pattern)))
        .order_by(Customer.name)
        .limit(limit)
    )
    return list(result.scalars().all())

from typing import Any, List

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.employee import new_uuid
from app.models.master_data import ApplicationMasterData


async def get_all_master_data(db: AsyncSession) -> List[ApplicationMasterData]:
    result = await db.execute(select(ApplicationMasterData).order_by(ApplicationMasterData.name))
    return list(result.scalars().all())


async def upsert_master_data(db: AsyncSession, name: str, value: Any, updated_by: str) -> None:
    stmt = pg_insert(ApplicationMasterData).values(
        uuid=new_uuid(), name=name, value=value, created_by=updated_by, updated_by=updated_by
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[ApplicationMasterData.name],
        set_={"value": value, "updated_by": updated_by},
    )
    await db.execute(stmt)

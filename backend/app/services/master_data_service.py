"""
Application master data: free-form name/value pairs (designations,
departments, document types and similar pick lists).
"""

import logging
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ForbiddenError, InternalServerError
from app.core.roles import ADMIN_ROLES, has_role
from app.schemas.auth import AuthContext
from app.schemas.master_data import MasterDataUpdate
from app.stores import master_data_store

logger = logging.getLogger("vodichron.master_data")


async def get_master_data(db: AsyncSession) -> Dict[str, Any]:
    return {row.name: row.value for row in await master_data_store.get_all_master_data(db)}


async def update_master_data(db: AsyncSession, payload: MasterDataUpdate, caller: AuthContext) -> Dict[str, Any]:
    if not has_role(caller.role, ADMIN_ROLES):
        raise ForbiddenError("Access denied for the operation request.")
    try:
        for field in payload.fields:
            await master_data_store.upsert_master_data(db, field.name, field.value, caller.uuid)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Master data update failed: {e}")
        raise InternalServerError("Unable to update master data at the moment, please try again.")
    logger.info(f"Master data {[f.name for f in payload.fields]} updated by {caller.uuid}")
    return await get_master_data(db)

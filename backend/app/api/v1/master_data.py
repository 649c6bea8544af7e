from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.schemas.auth import AuthContext
from app.schemas.master_data import MasterDataUpdate
from app.services import master_data_service

router = APIRouter()


@router.get("", response_model=Dict[str, Any])
async def get_master_data(
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await master_data_service.get_master_data(db)


@router.put("", response_model=Dict[str, Any])
async def update_master_data(
    payload: MasterDataUpdate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await master_data_service.update_master_data(db, payload, caller)

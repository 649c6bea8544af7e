from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db, get_page_params
from app.schemas.auth import AuthContext, MessageResponse
from app.schemas.common import Page, PageParams
from app.schemas.user import (
    ApplicationUserCreate,
    ApplicationUserResponse,
    ApplicationUserUpdate,
    CustomerAccessCreate,
    CustomerAccessResponse,
    PasswordChange,
)
from app.services.employees import user_service

router = APIRouter()


@router.post("", response_model=ApplicationUserResponse, status_code=201)
async def register_user(
    payload: ApplicationUserCreate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.register_user(db, payload, caller)


@router.get("", response_model=Page[ApplicationUserResponse])
async def list_users(
    params: PageParams = Depends(get_page_params),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.list_users(db, caller, params)


@router.patch("/{user_id}", response_model=ApplicationUserResponse)
async def update_user(
    user_id: str,
    payload: ApplicationUserUpdate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.update_user(db, user_id, payload, caller)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    payload: PasswordChange,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await user_service.change_password(db, payload, caller)
    return MessageResponse(message="Password changed successfully.")


@router.post("/customer-access", response_model=CustomerAccessResponse, status_code=201)
async def create_customer_access(
    payload: CustomerAccessCreate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.create_customer_access(db, payload, caller)

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db, get_page_params
from app.schemas.auth import AuthContext, MessageResponse
from app.schemas.common import Page, PageParams
from app.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from app.services.customers import customer_service

router = APIRouter()


@router.post("", response_model=CustomerResponse, status_code=201)
async def create_customer(
    payload: CustomerCreate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await customer_service.create_customer(db, payload, caller)


@router.get("", response_model=Page[CustomerResponse])
async def list_customers(
    params: PageParams = Depends(get_page_params),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await customer_service.list_customers(db, caller, params)


@router.get("/search", response_model=List[CustomerResponse])
async def search_customers(
    keyword: str = Query(..., min_length=1),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await customer_service.search_customers(db, keyword, caller)


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: str,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await customer_service.get_customer(db, customer_id, caller)


@router.patch("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: str,
    payload: CustomerUpdate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await customer_service.update_customer(db, customer_id, payload, caller)


@router.delete("/{customer_id}", response_model=MessageResponse)
async def delete_customer(
    customer_id: str,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await customer_service.delete_customer(db, customer_id, caller)
    return MessageResponse(message="Customer deleted successfully.")

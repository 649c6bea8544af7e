from typing import List

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db, get_page_params
from app.core.rate_limiter import RateLimits, limiter
from app.schemas.auth import AuthContext, MessageResponse
from app.schemas.common import Page, PageParams
from app.schemas.document import DocumentResponse, DocumentStatusUpdate
from app.services.employees import document_service

router = APIRouter()


@router.post("/employee/{employee_id}", response_model=DocumentResponse, status_code=201)
@limiter.limit(RateLimits.FILE_UPLOAD)
async def upload_document(
    request: Request,
    employee_id: str,
    document_type: str = Form(...),
    file: UploadFile = File(...),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await document_service.upload_document(db, employee_id, document_type, file, caller)


@router.get("/employee/{employee_id}", response_model=List[DocumentResponse])
async def list_employee_documents(
    employee_id: str,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await document_service.list_employee_documents(db, employee_id, caller)


@router.get("/reportees", response_model=Page[DocumentResponse])
async def list_reportee_documents(
    params: PageParams = Depends(get_page_params),
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await document_service.list_reportee_documents(db, caller, params)


@router.patch("/{document_id}/status", response_model=DocumentResponse)
async def update_document_status(
    document_id: str,
    payload: DocumentStatusUpdate,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await document_service.update_document_status(db, document_id, payload, caller)


@router.get("/{document_id}/download")
async def download_document(
    document_id: str,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    path, download_name = await document_service.get_document_file(db, document_id, caller)
    return FileResponse(path, filename=download_name)


@router.delete("/{document_id}", response_model=MessageResponse)
async def delete_document(
    document_id: str,
    caller: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await document_service.delete_document(db, document_id, caller)
    return MessageResponse(message="Document deleted successfully.")

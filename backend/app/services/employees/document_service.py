"""
Employee documents stored under {ASSET_PATH}/employee_documents with an HR
approval flag on each record.
"""

import logging
import uuid
from pathlib import Path
from typing import List, Tuple

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import BadRequestError, ForbiddenError, InternalServerError, NotFoundError
from app.core.roles import ADMIN_ROLES, FINAL_APPROVAL_STATUSES, HR_ROLES, has_role
from app.schemas.auth import AuthContext
from app.schemas.common import Page, PageParams
from app.schemas.document import DocumentResponse, DocumentStatusUpdate
from app.services.access import can_view_employee, reportee_ids
from app.stores import document_store, employee_store

logger = logging.getLogger("vodichron.documents")

ACCESS_DENIED = "Access denied for the operation request."
DOCUMENT_NOT_FOUND = "Document not found."


def documents_dir() -> Path:
    return Path(settings.ASSET_PATH) / "employee_documents"


def _stored_name(original_name: str) -> str:
    return f"{uuid.uuid4()}{Path(original_name or '').suffix.lower()}"


async def upload_document(
    db: AsyncSession, employee_id: str, document_type: str, file: UploadFile, caller: AuthContext
) -> DocumentResponse:
    if not settings.ALLOW_DOCUMENT_UPLOAD:
        raise BadRequestError("Document upload is disabled.")
    if caller.uuid != employee_id and not has_role(caller.role, ADMIN_ROLES):
        raise ForbiddenError(ACCESS_DENIED)
    if not document_type or not document_type.strip():
        raise BadRequestError("Document type is required.")
    if await employee_store.get_employee(db, employee_id) is None:
        raise BadRequestError("Employee not found. Please check employee ID.")

    content = await file.read()
    if not content:
        raise BadRequestError("Uploaded file is empty.")
    if len(content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise BadRequestError(f"File exceeds the {settings.MAX_UPLOAD_SIZE_MB} MB limit.")

    target_dir = documents_dir()
    target_dir.mkdir(parents=True, exist_ok=True)
    file_name = _stored_name(file.filename)
    dest = target_dir / file_name
    dest.write_bytes(content)

    try:
        document = await document_store.create_document(db, {
            "employee_id": employee_id,
            "document_type": document_type.strip(),
            "file_name": file_name,
            "original_file_name": file.filename,
            "hr_approval_status": "REQUESTED",
            "created_by": caller.uuid,
            "updated_by": caller.uuid,
        })
    except SQLAlchemyError as e:
        await db.rollback()
        dest.unlink(missing_ok=True)
        logger.error(f"Failed to store document for {employee_id}: {e}")
        raise InternalServerError("Unable to upload the document at the moment, please try again.")

    logger.info(f"Document {document.uuid} ({document_type}) uploaded for {employee_id} by {caller.uuid}")
    return DocumentResponse.model_validate(document)


async def update_document_status(
    db: AsyncSession, document_id: str, update: DocumentStatusUpdate, caller: AuthContext
) -> DocumentResponse:
    if not has_role(caller.role, HR_ROLES):
        raise ForbiddenError(ACCESS_DENIED)
    if update.approval_status not in FINAL_APPROVAL_STATUSES:
        raise BadRequestError('Invalid approval status. Must be either "APPROVED" or "REJECTED".')
    if not await document_store.update_document_status(
        db, document_id, update.approval_status, caller.uuid, update.comment
    ):
        raise NotFoundError(DOCUMENT_NOT_FOUND)
    logger.info(f"Document {document_id} {update.approval_status} by {caller.uuid}")
    return DocumentResponse.model_validate(await document_store.get_document(db, document_id))


async def delete_document(db: AsyncSession, document_id: str, caller: AuthContext) -> None:
    document = await document_store.get_document(db, document_id)
    if document is None:
        raise NotFoundError(DOCUMENT_NOT_FOUND)
    if document.employee_id != caller.uuid and not has_role(caller.role, HR_ROLES):
        raise ForbiddenError(ACCESS_DENIED)

    file_name = document.file_name
    await document_store.delete_document(db, document_id)
    try:
        (documents_dir() / file_name).unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove file {file_name} of document {document_id}: {e}")
    logger.info(f"Document {document_id} deleted by {caller.uuid}")


async def get_document_file(db: AsyncSession, document_id: str, caller: AuthContext) -> Tuple[Path, str]:
    """Path on disk and download name for a document the caller may see."""
    document = await document_store.get_document(db, document_id)
    if document is None:
        raise NotFoundError(DOCUMENT_NOT_FOUND)
    if not await can_view_employee(db, caller, document.employee_id):
        raise ForbiddenError(ACCESS_DENIED)
    path = documents_dir() / document.file_name
    if not path.is_file():
        raise NotFoundError("Document file is missing.")
    return path, document.original_file_name or document.file_name


async def list_employee_documents(db: AsyncSession, employee_id: str, caller: AuthContext) -> List[DocumentResponse]:
    if not await can_view_employee(db, caller, employee_id):
        raise ForbiddenError(ACCESS_DENIED)
    return [DocumentResponse.model_validate(d) for d in await document_store.list_employee_documents(db, employee_id)]


async def list_reportee_documents(db: AsyncSession, caller: AuthContext, params: PageParams) -> Page[DocumentResponse]:
    visible = await reportee_ids(db, caller)
    if visible is not None and not visible:
        return Page[DocumentResponse](items=[], page=params.page, page_size=params.page_size, total=0)

    rows, total = await document_store.list_reportee_documents(
        db, caller.uuid, params.offset, params.page_size, employee_ids=visible
    )
    items = []
    for document, name in rows:
        response = DocumentResponse.model_validate(document)
        response.employee_name = name
        items.append(response)
    return Page[DocumentResponse](items=items, page=params.page, page_size=params.page_size, total=total)

from datetime import date
from typing import Any, List, Optional, Tuple

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.document import EmployeeDocument
from app.models.employee import Employee


async def create_document(db: AsyncSession, values: dict[str, Any]) -> EmployeeDocument:
    document = EmployeeDocument(**values)
    db.add(document)
    await db.commit()
    await db.refresh(document)
    return document


async def get_document(db: AsyncSession, document_id: str) -> Optional[EmployeeDocument]:
    return await db.scalar(select(EmployeeDocument).where(EmployeeDocument.uuid == document_id))


async def update_document_status(
    db: AsyncSession, document_id: str, status: str, approver_id: str, comment: Optional[str]
) -> int:
    result = await db.execute(
        update(EmployeeDocument)
        .where(EmployeeDocument.uuid == document_id)
        .values(
            hr_approval_status=status,
            hr_approver_id=approver_id,
            hr_approval_date=date.today(),
            hr_approver_comments=comment,
            updated_by=approver_id,
        )
    )
    await db.commit()
    return result.rowcount or 0


async def delete_document(db: AsyncSession, document_id: str) -> int:
    result = await db.execute(delete(EmployeeDocument).where(EmployeeDocument.uuid == document_id))
    await db.commit()
    return result.rowcount or 0


async def list_employee_documents(db: AsyncSession, employee_id: str) -> List[EmployeeDocument]:
    result = await db.execute(
        select(EmployeeDocument)
        .where(EmployeeDocument.employee_id == employee_id)
        .order_by(EmployeeDocument.created_at.desc())
    )
    return list(result.scalars().all())


async def list_reportee_documents(
    db: AsyncSession,
    exclude_employee_id: str,
    offset: int,
    limit: int,
    employee_ids: Optional[List[str]] = None,
) -> Tuple[List[Tuple[EmployeeDocument, str]], int]:
    """Documents of other employees; restricted to `employee_ids` when given."""
    conditions = [EmployeeDocument.employee_id != exclude_employee_id]
    if employee_ids is not None:
        conditions.append(EmployeeDocument.employee_id.in_(employee_ids))

    total = await db.scalar(select(func.count()).select_from(EmployeeDocument).where(*conditions))
    result = await db.execute(
        select(EmployeeDocument, Employee.name)
        .join(Employee, Employee.uuid == EmployeeDocument.employee_id)
        .where(*conditions)
        .order_by(EmployeeDocument.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    return [(row[0], row[1]) for row in result.all()], total or 0

from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime


class DocumentStatusUpdate(BaseModel):
    approval_status: str = Field(..., pattern="^(APPROVED|REJECTED)$")
    comment: Optional[str] = None


class DocumentResponse(BaseModel):
    uuid: str
    employee_id: str
    document_type: str
    file_name: str
    original_file_name: Optional[str] = None
    hr_approval_status: str
    hr_approver_id: Optional[str] = None
    hr_approval_date: Optional[date] = None
    hr_approver_comments: Optional[str] = None
    created_at: Optional[datetime] = None
    employee_name: Optional[str] = None

    class Config:
        from_attributes = True

from sqlalchemy import Column, String, Date, DateTime, Text, ForeignKey
from sqlalchemy.sql import func

from app.db.base_class import Base
from app.models.employee import new_uuid


class EmployeeDocument(Base):
    __tablename__ = "employee_docs"  # type: ignore[assignment]

    uuid = Column(String(50), primary_key=True, default=new_uuid)
    employee_id = Column(String(50), ForeignKey("employees.uuid", ondelete="CASCADE"), nullable=False, index=True)
    document_type = Column(String(50), nullable=False, index=True)
    # Stored file name under {ASSET_PATH}/employee_documents
    file_name = Column(String(100), nullable=False)
    original_file_name = Column(String(255), nullable=True)
    hr_approval_status = Column(String(10), nullable=False, default="REQUESTED", index=True)
    hr_approver_id = Column(String(50), nullable=True)
    hr_approval_date = Column(Date, nullable=True)
    hr_approver_comments = Column(Text, nullable=True)
    created_by = Column(String(50), nullable=True)
    updated_by = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

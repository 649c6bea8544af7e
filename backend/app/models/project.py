from sqlalchemy import Column, String, Date, DateTime, Boolean, Text, ForeignKey, Index
from sqlalchemy.sql import func

from app.db.base_class import Base
from app.models.employee import new_uuid


class Project(Base):
    __tablename__ = "projects"  # type: ignore[assignment]

    uuid = Column(String(50), primary_key=True, default=new_uuid)
    name = Column(String(100), nullable=False, index=True)
    domain = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default="INITIATED", index=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_by = Column(String(50), nullable=True)
    updated_by = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class ProjectResourceAllocation(Base):
    """Assigns an employee to a customer's project."""
    __tablename__ = "project_resource_allocation"  # type: ignore[assignment]

    uuid = Column(String(50), primary_key=True, default=new_uuid)
    allocation_code = Column(String(10), nullable=False)
    project_id = Column(String(50), ForeignKey("projects.uuid", ondelete="CASCADE"), nullable=False, index=True)
    customer_id = Column(String(50), ForeignKey("customers.uuid", ondelete="CASCADE"), nullable=False, index=True)
    employee_id = Column(String(50), ForeignKey("employees.uuid", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    role = Column(String(255), nullable=False)
    customer_approver = Column(Boolean, default=False, nullable=False)
    status = Column(String(10), nullable=False, default="ACTIVE")
    created_by = Column(String(50), nullable=True)
    updated_by = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("uq_resource_allocation", "project_id", "customer_id", "employee_id", unique=True),
        Index("idx_resource_allocation_status", "status"),
    )

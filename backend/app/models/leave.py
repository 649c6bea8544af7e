from sqlalchemy import Column, String, Integer, Date, DateTime, Numeric, Boolean, JSON, ForeignKey, Index
from sqlalchemy.sql import func

from app.db.base_class import Base
from app.models.employee import new_uuid


class EmployeeLeave(Base):
    __tablename__ = "employee_leaves"  # type: ignore[assignment]

    uuid = Column(String(50), primary_key=True, default=new_uuid)
    request_number = Column(Integer, nullable=False, index=True)
    employee_id = Column(String(50), ForeignKey("employees.uuid", ondelete="CASCADE"), nullable=False, index=True)
    leave_type = Column(String(50), nullable=False)
    reason = Column(String(100), nullable=True)
    leave_start_date = Column(Date, nullable=False)
    leave_end_date = Column(Date, nullable=False)
    leave_days = Column(Numeric(4, 2), nullable=False)
    is_half_day = Column(Boolean, default=False, nullable=False)
    requested_date = Column(DateTime(timezone=True), server_default=func.now())
    # [{"approver_id", "approver_name", "approver_role", "approver_email", "status", "approver_comments", "approval_date"}]
    leave_approvers = Column(JSON, nullable=False)
    leave_approval_status = Column(String(10), nullable=False, default="REQUESTED", index=True)
    created_by = Column(String(50), nullable=True)
    updated_by = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_leaves_dates", "leave_start_date", "leave_end_date"),
    )


class EmployeeLeaveAllocation(Base):
    __tablename__ = "employee_leave_allocation"  # type: ignore[assignment]

    uuid = Column(String(50), primary_key=True, default=new_uuid)
    employee_id = Column(String(50), ForeignKey("employees.uuid", ondelete="CASCADE"), nullable=False, index=True)
    year = Column(String(4), nullable=False, index=True)
    leave_type = Column(String(50), nullable=False)
    leaves_applied = Column(Numeric(5, 2), nullable=False, default=0)
    leaves_allocated = Column(Numeric(5, 2), nullable=False, default=0)
    leaves_carry_forwarded = Column(Numeric(5, 2), nullable=False, default=0)
    created_by = Column(String(50), nullable=True)
    updated_by = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("uq_leave_allocation_employee_year_type", "employee_id", "year", "leave_type", unique=True),
    )

    @property
    def balance(self) -> float:
        return float(self.leaves_allocated or 0) + float(self.leaves_carry_forwarded or 0) - float(self.leaves_applied or 0)

from sqlalchemy import Column, String, Integer, Date, DateTime, Numeric, Text, JSON, ForeignKey, Index
from sqlalchemy.sql import func

from app.db.base_class import Base
from app.models.employee import new_uuid


class EmployeeTimesheet(Base):
    """One daily timesheet per employee per date."""
    __tablename__ = "employee_timesheets"  # type: ignore[assignment]

    uuid = Column(String(50), primary_key=True, default=new_uuid)
    employee_id = Column(String(50), ForeignKey("employees.uuid", ondelete="CASCADE"), nullable=False)
    request_number = Column(Integer, nullable=False)
    timesheet_date = Column(Date, nullable=False)
    task_details = Column(JSON, nullable=False)
    total_hours = Column(Numeric(4, 2), nullable=False)
    task_id = Column(String(20), nullable=True)
    approval_status = Column(String(10), nullable=False, default="REQUESTED")
    approver_id = Column(String(50), nullable=True)
    approval_date = Column(Date, nullable=True)
    approver_comments = Column(Text, nullable=True)
    created_by = Column(String(50), nullable=True)
    updated_by = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("uq_timesheets_employee_date", "employee_id", "timesheet_date", unique=True),
        Index("idx_timesheets_status", "approval_status"),
        Index("idx_timesheets_date", "timesheet_date"),
    )


class EmployeeWeeklyTimesheet(Base):
    """One weekly timesheet per employee per week (Monday start)."""
    __tablename__ = "employee_weekly_timesheets"  # type: ignore[assignment]

    uuid = Column(String(50), primary_key=True, default=new_uuid)
    employee_id = Column(String(50), ForeignKey("employees.uuid", ondelete="CASCADE"), nullable=False)
    request_number = Column(Integer, nullable=False)
    week_start_date = Column(Date, nullable=False)
    week_end_date = Column(Date, nullable=False)
    task_details = Column(JSON, nullable=False)
    total_hours = Column(Numeric(5, 2), nullable=False)
    task_id = Column(String(20), nullable=True)
    approval_status = Column(String(10), nullable=False, default="REQUESTED")
    approver_id = Column(String(50), nullable=True)
    approver_role = Column(String(50), nullable=True)
    approval_date = Column(Date, nullable=True)
    approver_comments = Column(Text, nullable=True)
    time_sheet_status = Column(String(10), nullable=False, default="SAVED")
    created_by = Column(String(50), nullable=True)
    updated_by = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("uq_weekly_timesheets_employee_week", "employee_id", "week_start_date", unique=True),
        Index("idx_weekly_timesheets_status", "time_sheet_status"),
    )

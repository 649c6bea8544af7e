from datetime import datetime

from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.sql import func

from app.db.base_class import Base
from app.models.employee import new_uuid


class ApplicationUser(Base):
    """Login account attached to exactly one employee."""
    __tablename__ = "application_users"  # type: ignore[assignment]

    uuid = Column(String(50), primary_key=True, default=new_uuid)
    employee_id = Column(String(50), ForeignKey("employees.uuid", ondelete="CASCADE"), nullable=False, unique=True)
    role = Column(String(20), nullable=False, default="employee")
    password = Column(String(255), nullable=False)
    password_update_timestamp = Column(DateTime, default=datetime.utcnow)
    status = Column(String(10), nullable=False, default="ACTIVE")
    is_system_generated = Column(Boolean, default=False, nullable=False)
    last_login = Column(DateTime, nullable=True)
    created_by = Column(String(50), nullable=True)
    updated_by = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


Index("idx_application_users_role", ApplicationUser.role)
Index("idx_application_users_status", ApplicationUser.status)

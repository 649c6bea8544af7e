from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.sql import func

from app.db.base_class import Base
from app.models.employee import new_uuid


class ApplicationMasterData(Base):
    """Named lists used to populate dropdowns (designations, departments, leave types...)."""
    __tablename__ = "application_master_data"  # type: ignore[assignment]

    uuid = Column(String(50), primary_key=True, default=new_uuid)
    name = Column(String(50), nullable=False, unique=True)
    value = Column(JSON, nullable=False)
    created_by = Column(String(50), nullable=True)
    updated_by = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

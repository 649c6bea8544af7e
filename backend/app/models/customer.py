from datetime import datetime

from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.sql import func

from app.db.base_class import Base
from app.models.employee import new_uuid


class Customer(Base):
    __tablename__ = "customers"  # type: ignore[assignment]

    uuid = Column(String(50), primary_key=True, default=new_uuid)
    name = Column(String(200), nullable=False)
    primary_contact = Column(String(15), nullable=False)
    secondary_contact = Column(String(15), nullable=True)
    email = Column(String(200), nullable=False, unique=True)
    country = Column(String(200), nullable=False)
    timezone = Column(String(200), nullable=False)
    status = Column(String(10), nullable=False, default="ACTIVE")
    created_by = Column(String(50), nullable=True)
    updated_by = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


Index("idx_customers_name", Customer.name)
Index("idx_customers_status", Customer.status)


class CustomerAppAccess(Base):
    """Login credentials for a customer contact."""
    __tablename__ = "customer_app_access"  # type: ignore[assignment]

    uuid = Column(String(50), primary_key=True, default=new_uuid)
    customer_id = Column(String(50), ForeignKey("customers.uuid", ondelete="CASCADE"), nullable=False, unique=True)
    password = Column(String(255), nullable=False)
    password_update_timestamp = Column(DateTime, default=datetime.utcnow)
    status = Column(String(10), nullable=False, default="ACTIVE")
    is_system_generated = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime, nullable=True)
    created_by = Column(String(50), nullable=True)
    updated_by = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

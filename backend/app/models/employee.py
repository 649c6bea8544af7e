import uuid
from datetime import datetime

from sqlalchemy import Column, String, Date, DateTime, Text, ForeignKey, Index, JSON
from sqlalchemy.sql import func

from app.core.encryption import EncryptedString
from app.db.base_class import Base


def new_uuid() -> str:
    return str(uuid.uuid4())


class Employee(Base):
    __tablename__ = "employees"  # type: ignore[assignment]

    uuid = Column(String(50), primary_key=True, default=new_uuid)
    name = Column(String(100), nullable=False)
    gender = Column(String(10), nullable=False)
    date_of_birth = Column(Date, nullable=True)
    contact_number = Column(String(15), nullable=False)
    personal_email = Column(String(200), nullable=True, unique=True)
    blood_group = Column(String(10), nullable=True)
    marital_status = Column(String(20), nullable=True)
    permanent_address = Column(String(255), nullable=True)
    temporary_address = Column(String(255), nullable=True)
    employee_code = Column(String(15), nullable=True, unique=True)
    official_email = Column(String(200), nullable=True, unique=True)
    skills = Column(Text, nullable=True)
    date_of_joining = Column(Date, nullable=True)
    reporting_manager_id = Column(String(50), ForeignKey("employees.uuid", ondelete="SET NULL"), nullable=True)
    reporting_director_id = Column(String(50), ForeignKey("employees.uuid", ondelete="SET NULL"), nullable=True)
    designation = Column(String(50), nullable=True)
    department = Column(String(50), nullable=True)
    # PII, Fernet encrypted at rest
    pan_card_number = Column(EncryptedString(500), nullable=True)
    bank_account_number = Column(EncryptedString(500), nullable=True)
    aadhaar_card_number = Column(EncryptedString(500), nullable=True)
    pf_account_number = Column(EncryptedString(500), nullable=True)
    ifsc_code = Column(String(20), nullable=True)
    highest_qualification = Column(String(200), nullable=True)
    total_work_experience = Column(String(100), nullable=True)
    linkedin = Column(String(255), nullable=True)
    employment_status = Column(String(10), nullable=False, default="ACTIVE")
    created_by = Column(String(50), nullable=True)
    updated_by = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


Index("idx_employees_reporting_manager", Employee.reporting_manager_id)
Index("idx_employees_reporting_director", Employee.reporting_director_id)
Index("idx_employees_status", Employee.employment_status)


class EmployeeOnlineStatus(Base):
    __tablename__ = "employee_online_status"  # type: ignore[assignment]

    uuid = Column(String(50), primary_key=True, default=new_uuid)
    employee_id = Column(String(50), ForeignKey("employees.uuid", ondelete="CASCADE"), nullable=False, unique=True)
    online_status = Column(String(10), nullable=False, default="OFFLINE")
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class EmployeeActivity(Base):
    __tablename__ = "employee_application_activities"  # type: ignore[assignment]

    uuid = Column(String(50), primary_key=True, default=new_uuid)
    employee_id = Column(String(50), ForeignKey("employees.uuid", ondelete="CASCADE"), nullable=False, index=True)
    activity_name = Column(String(50), nullable=False, index=True)
    value = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

from datetime import datetime

from sqlalchemy import Column, String, DateTime

from app.db.base_class import Base
from app.models.employee import new_uuid


class PasswordResetRequest(Base):
    __tablename__ = "user_password_reset_request"  # type: ignore[assignment]

    uuid = Column(String(50), primary_key=True, default=new_uuid)
    email = Column(String(200), nullable=False, index=True)
    token = Column(String(255), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

"""
Refresh-token sessions for both subject types (employee, customer).
Only the SHA256 hash of the refresh token is stored.
"""

from datetime import datetime

from sqlalchemy import Column, String, DateTime, Index

from app.db.base_class import Base
from app.models.employee import new_uuid


class Session(Base):
    __tablename__ = "sessions"  # type: ignore[assignment]

    uuid = Column(String(50), primary_key=True, default=new_uuid)
    subject_id = Column(String(50), nullable=False)
    subject_type = Column(String(10), nullable=False)
    token_hash = Column(String(128), nullable=False, unique=True)
    user_agent = Column(String(255), nullable=True)
    ip_address = Column(String(64), nullable=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    revoked_at = Column(DateTime, nullable=True)

    def is_valid(self) -> bool:
        """Not expired and not revoked."""
        return self.revoked_at is None and self.expires_at > datetime.utcnow()


Index("idx_sessions_subject", Session.subject_id)
Index("idx_sessions_expires", Session.expires_at)

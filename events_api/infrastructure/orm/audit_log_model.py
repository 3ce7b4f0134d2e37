"""Audit log ORM Model"""

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, JSON, String, Uuid
from sqlalchemy.sql import func

from ...db.models import Base


class AuditLogModel(Base):
    __tablename__ = 'audit_logs'

    id = Column(Uuid, primary_key=True, default=uuid4)
    user_id = Column(Uuid, ForeignKey('users.id'), nullable=True, index=True)
    action = Column(String(100), nullable=False, index=True)
    resource_type = Column(String(50), nullable=True)
    resource_id = Column(String(64), nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

"""Refresh token ORM model"""

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.sql import func

from ...db.models import Base


class RefreshTokenModel(Base):
    """Refresh token ORM model; only a SHA-256 digest of the token is stored"""

    __tablename__ = "refresh_tokens"

    id = Column(Uuid, primary_key=True, default=uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    token_hash = Column(String(64), unique=True, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
    replaced_by_id = Column(Uuid, nullable=True)

    __table_args__ = (
        Index("idx_refresh_tokens_user_revoked", "user_id", "revoked_at"),
    )

    def __repr__(self):
        return f"<RefreshTokenModel(id={self.id}, user_id={self.user_id}, expires_at={self.expires_at})>"

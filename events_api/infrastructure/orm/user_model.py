"""User ORM Model"""

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Enum as SQLEnum, Index, String, Uuid, text
from sqlalchemy.sql import func

from ...db.models import Base
from ...domain.enums import UserRole, UserStatus


class UserModel(Base):
    __tablename__ = 'users'

    id = Column(Uuid, primary_key=True, default=uuid4)
    email = Column(String(320), nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(32), nullable=True)
    role = Column(SQLEnum(UserRole, name='user_role'), default=UserRole.USER, nullable=False)
    status = Column(SQLEnum(UserStatus, name='user_status'), default=UserStatus.ACTIVE, nullable=False)
    email_verified = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        # Emails stay unique among accounts that have not been soft-deleted
        Index(
            'uq_users_email_not_deleted',
            'email',
            unique=True,
            postgresql_where=text("status <> 'DELETED'"),
            sqlite_where=text("status <> 'DELETED'"),
        ),
    )

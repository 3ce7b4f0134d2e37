"""User repository implementation using SQLAlchemy ORM"""

from typing import List, Optional

from sqlalchemy.orm import Session

from ...core.clock import ensure_utc
from ...domain.entities.user import User
from ...domain.enums import UserStatus
from ...domain.repositories.user_repository import IUserRepository
from ...domain.value_objects.email import Email
from ...domain.value_objects.entity_ids import UserId
from ..orm.user_model import UserModel
from ._errors import translate_integrity_errors


class UserRepositoryImpl(IUserRepository):
    """Repository implementation for User aggregate"""

    def __init__(self, session: Session):
        self.session = session

    async def get_by_id(self, user_id: UserId) -> Optional[User]:
        """Get user by ID"""
        model = self.session.query(UserModel).filter(UserModel.id == user_id.value).first()
        return self._map_to_entity(model) if model else None

    async def get_by_email(self, email: Email) -> Optional[User]:
        """Get non-deleted user by email"""
        model = self._active_email_query(email).first()
        return self._map_to_entity(model) if model else None

    async def exists_by_email(self, email: Email) -> bool:
        """Check if a non-deleted user exists by email"""
        return self._active_email_query(email).first() is not None

    async def add(self, user: User) -> User:
        """Add a new user"""
        model = self._create_model_from_entity(user)
        self.session.add(model)
        with translate_integrity_errors("User with this email already exists"):
            self.session.flush()
        return user

    async def update(self, user: User) -> User:
        """Update an existing user"""
        existing = self.session.query(UserModel).filter(UserModel.id == user.id.value).first()
        if existing:
            self._update_model_from_entity(existing, user)
            with translate_integrity_errors("User with this email already exists"):
                self.session.flush()
        return user

    async def count(self) -> int:
        """Count total users"""
        return self.session.query(UserModel).count()

    async def get_paginated(self, page: int, limit: int) -> List[User]:
        """Get paginated users"""
        offset = (page - 1) * limit
        models = (
            self.session.query(UserModel)
            .order_by(UserModel.created_at.desc(), UserModel.id)
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [self._map_to_entity(model) for model in models]

    def _active_email_query(self, email: Email):
        return self.session.query(UserModel).filter(
            UserModel.email == str(email),
            UserModel.status != UserStatus.DELETED,
        )

    def _create_model_from_entity(self, user: User) -> UserModel:
        """Create ORM model from domain entity"""
        return UserModel(
            id=user.id.value,
            email=str(user.email),
            password_hash=user.hashed_password,
            first_name=user.first_name,
            last_name=user.last_name,
            phone=user.phone,
            role=user.role,
            status=user.status,
            email_verified=user.email_verified,
            created_at=user.created_at,
            updated_at=user.updated_at,
            last_login_at=user.last_login_at,
        )

    def _update_model_from_entity(self, model: UserModel, user: User) -> None:
        """Update ORM model from domain entity"""
        model.email = str(user.email)
        model.password_hash = user.hashed_password
        model.first_name = user.first_name
        model.last_name = user.last_name
        model.phone = user.phone
        model.role = user.role
        model.status = user.status
        model.email_verified = user.email_verified
        model.updated_at = user.updated_at
        model.last_login_at = user.last_login_at

    def _map_to_entity(self, model: UserModel) -> User:
        """Map ORM model to domain entity"""
        return User(
            id=UserId(model.id),
            email=Email(model.email),
            hashed_password=model.password_hash,
            first_name=model.first_name,
            last_name=model.last_name,
            phone=model.phone,
            role=model.role,
            status=model.status,
            email_verified=model.email_verified,
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
            last_login_at=ensure_utc(model.last_login_at),
        )

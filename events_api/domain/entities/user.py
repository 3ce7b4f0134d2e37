"""User entity with business logic"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ...core.clock import utcnow
from ..enums import UserRole, UserStatus
from ..errors import ValidationError
from ..events.user_events import UserRoleChanged, UserStatusChanged
from ..value_objects.email import Email
from ..value_objects.entity_ids import UserId


MIN_NAME_LENGTH = 2


@dataclass
class User:
    id: UserId
    email: Email
    hashed_password: str = field(repr=False)
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.ACTIVE
    email_verified: bool = False

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    last_login_at: Optional[datetime] = None

    # Domain events
    _events: List = field(default_factory=list, init=False, repr=False)

    @classmethod
    def create(
        cls,
        email: Email,
        hashed_password: str,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
        role: UserRole = UserRole.USER,
    ) -> "User":
        """Factory method to create a new user with proper defaults"""
        for field_name, value in (("first_name", first_name), ("last_name", last_name)):
            if not value or len(value.strip()) < MIN_NAME_LENGTH:
                raise ValidationError(
                    f"{field_name} must be at least {MIN_NAME_LENGTH} characters",
                    errors=[{"field": field_name, "message": f"at least {MIN_NAME_LENGTH} characters"}],
                )
        now = utcnow()
        return cls(
            id=UserId.generate(),
            email=email,
            hashed_password=hashed_password,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            phone=phone,
            role=role,
            status=UserStatus.ACTIVE,
            email_verified=False,
            created_at=now,
            updated_at=now,
        )

    def record_login(self) -> None:
        """Record user login"""
        self.last_login_at = utcnow()

    def change_role(self, role: UserRole) -> None:
        """Business logic: change role (an administrator action)"""
        if self.status == UserStatus.DELETED:
            raise ValidationError("Cannot change the role of a deleted user")
        if role == self.role:
            return
        old_role = self.role
        self.role = role
        self.updated_at = utcnow()
        self._events.append(UserRoleChanged(
            user_id=self.id,
            old_role=old_role,
            new_role=role,
            changed_at=self.updated_at,
        ))

    def change_status(self, status: UserStatus) -> None:
        """Business logic: activate, suspend or soft-delete"""
        if self.status == UserStatus.DELETED and status != UserStatus.DELETED:
            raise ValidationError("Deleted users cannot be restored")
        if status == self.status:
            return
        old_status = self.status
        self.status = status
        self.updated_at = utcnow()
        self._events.append(UserStatusChanged(
            user_id=self.id,
            old_status=old_status,
            new_status=status,
            changed_at=self.updated_at,
        ))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def get_events(self) -> List:
        """Get and clear domain events"""
        events = self._events.copy()
        self._events.clear()
        return events

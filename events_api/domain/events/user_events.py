"""User domain events"""

from dataclasses import dataclass
from datetime import datetime

from ..enums import UserRole, UserStatus
from ..value_objects.entity_ids import UserId


@dataclass(frozen=True)
class UserRoleChanged:
    user_id: UserId
    old_role: UserRole
    new_role: UserRole
    changed_at: datetime


@dataclass(frozen=True)
class UserStatusChanged:
    user_id: UserId
    old_status: UserStatus
    new_status: UserStatus
    changed_at: datetime

"""Audit log repository interface"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from ..value_objects.entity_ids import UserId


class IAuditLogRepository(ABC):

    @abstractmethod
    async def record(
        self,
        action: str,
        user_id: Optional[UserId] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        pass

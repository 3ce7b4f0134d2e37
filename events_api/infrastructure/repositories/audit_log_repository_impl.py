"""Audit log repository implementation"""

from typing import Any, Optional

from sqlalchemy.orm import Session

from ...domain.repositories.audit_log_repository import IAuditLogRepository
from ...domain.value_objects.entity_ids import UserId
from ..orm.audit_log_model import AuditLogModel


class AuditLogRepositoryImpl(IAuditLogRepository):
    """Append-only audit trail stored alongside the business data"""

    def __init__(self, session: Session):
        self.session = session

    async def record(
        self,
        action: str,
        user_id: Optional[UserId] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.session.add(AuditLogModel(
            user_id=user_id.value if user_id else None,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details,
        ))
        self.session.flush()

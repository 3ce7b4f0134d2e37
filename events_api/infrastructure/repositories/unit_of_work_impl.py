"""Unit of Work implementation over a synchronous SQLAlchemy session"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...domain.errors import ConflictError
from ...domain.repositories.unit_of_work import IUnitOfWork
from .audit_log_repository_impl import AuditLogRepositoryImpl
from .booking_repository_impl import BookingRepositoryImpl
from .event_repository_impl import EventRepositoryImpl
from .refresh_token_repository_impl import RefreshTokenRepositoryImpl
from .user_repository_impl import UserRepositoryImpl
from .venue_repository_impl import VenueRepositoryImpl


class UnitOfWorkImpl(IUnitOfWork):

    def __init__(self, session: Session):
        self.session = session
        self.users = UserRepositoryImpl(session)
        self.events = EventRepositoryImpl(session)
        self.bookings = BookingRepositoryImpl(session)
        self.refresh_tokens = RefreshTokenRepositoryImpl(session)
        self.venues = VenueRepositoryImpl(session)
        self.audit_logs = AuditLogRepositoryImpl(session)
        self._committed = False

    async def __aenter__(self):
        self._committed = False
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            await self.rollback()
        elif not self._committed:
            await self.commit()

    async def commit(self) -> None:
        """Commit transaction"""
        try:
            self.session.commit()
            self._committed = True
        except IntegrityError as e:
            self.rollback_sync()
            raise ConflictError("Resource conflicts with existing data") from e
        except Exception:
            self.rollback_sync()
            raise

    async def rollback(self) -> None:
        """Rollback transaction"""
        self.rollback_sync()

    def rollback_sync(self) -> None:
        """Synchronous rollback helper"""
        self.session.rollback()

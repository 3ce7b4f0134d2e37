"""Unit of Work interface for transaction management"""

from abc import ABC, abstractmethod

from .audit_log_repository import IAuditLogRepository
from .booking_repository import IBookingRepository
from .event_repository import IEventRepository
from .refresh_token_repository import IRefreshTokenRepository
from .user_repository import IUserRepository
from .venue_repository import IVenueRepository


class IUnitOfWork(ABC):
    """Unit of Work interface for managing transactions across repositories"""

    users: IUserRepository
    events: IEventRepository
    bookings: IBookingRepository
    refresh_tokens: IRefreshTokenRepository
    venues: IVenueRepository
    audit_logs: IAuditLogRepository

    @abstractmethod
    async def __aenter__(self):
        """Enter async context"""
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context: roll back on error, commit otherwise"""
        pass

    @abstractmethod
    async def commit(self):
        """Commit transaction"""
        pass

    @abstractmethod
    async def rollback(self):
        """Rollback transaction"""
        pass

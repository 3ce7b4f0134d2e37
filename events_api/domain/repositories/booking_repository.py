"""Booking repository interface"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..entities.booking import Booking
from ..value_objects.entity_ids import BookingId, EventId, UserId


class IBookingRepository(ABC):

    @abstractmethod
    async def get_by_id(self, booking_id: BookingId) -> Optional[Booking]:
        pass

    @abstractmethod
    async def add(self, booking: Booking) -> Booking:
        pass

    @abstractmethod
    async def mark_cancelled(self, booking: Booking) -> bool:
        """Write the cancelled status only if the stored booking still holds
        seats. Returns False if another request cancelled it first."""
        pass

    @abstractmethod
    async def list(self, user_id: Optional[UserId], offset: int, limit: int) -> List[Booking]:
        """Bookings of one user, or of everyone when ``user_id`` is None"""
        pass

    @abstractmethod
    async def count(self, user_id: Optional[UserId]) -> int:
        pass

    @abstractmethod
    async def count_active_for_event(self, event_id: EventId) -> int:
        pass

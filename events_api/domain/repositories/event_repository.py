"""Event repository interface"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ..entities.event import Event
from ..enums import EventCategory, EventStatus
from ..value_objects.entity_ids import EventId, UserId


@dataclass(frozen=True)
class EventFilter:
    status: Optional[EventStatus] = None
    category: Optional[EventCategory] = None
    organizer_id: Optional[UserId] = None


class IEventRepository(ABC):

    @abstractmethod
    async def get_by_id(self, event_id: EventId) -> Optional[Event]:
        pass

    @abstractmethod
    async def get_by_slug(self, slug: str) -> Optional[Event]:
        pass

    @abstractmethod
    async def exists_by_slug(self, slug: str) -> bool:
        pass

    @abstractmethod
    async def add(self, event: Event) -> Event:
        pass

    @abstractmethod
    async def update(self, event: Event) -> Event:
        """Persist edits and status changes; never writes booked_count"""
        pass

    @abstractmethod
    async def delete(self, event_id: EventId) -> None:
        pass

    @abstractmethod
    async def list(self, event_filter: EventFilter, offset: int, limit: int) -> List[Event]:
        pass

    @abstractmethod
    async def count(self, event_filter: EventFilter) -> int:
        pass

    @abstractmethod
    async def reserve_seats(self, event_id: EventId, seats: int, now: datetime) -> bool:
        """Atomically add ``seats`` to booked_count if the event is published,
        has not started and has room. Returns False when nothing was reserved."""
        pass

    @abstractmethod
    async def release_seats(self, event_id: EventId, seats: int) -> bool:
        """Atomically give ``seats`` back. Returns False when the counter had
        fewer seats booked than released and was floored at zero."""
        pass

"""Venue repository interface (venues are managed elsewhere; events only reference them)"""

from abc import ABC, abstractmethod

from ..value_objects.entity_ids import VenueId


class IVenueRepository(ABC):

    @abstractmethod
    async def exists(self, venue_id: VenueId) -> bool:
        pass

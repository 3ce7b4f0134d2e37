"""Venue repository implementation"""

from sqlalchemy.orm import Session

from ...domain.repositories.venue_repository import IVenueRepository
from ...domain.value_objects.entity_ids import VenueId
from ..orm.venue_model import VenueModel


class VenueRepositoryImpl(IVenueRepository):

    def __init__(self, session: Session):
        self.session = session

    async def exists(self, venue_id: VenueId) -> bool:
        return self.session.query(VenueModel.id).filter(VenueModel.id == venue_id.value).first() is not None

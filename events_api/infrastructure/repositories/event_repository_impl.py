"""Event repository implementation using SQLAlchemy ORM"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import case, update
from sqlalchemy.orm import Session

from ...core.clock import ensure_utc
from ...domain.entities.event import Event
from ...domain.enums import EventStatus
from ...domain.repositories.event_repository import EventFilter, IEventRepository
from ...domain.value_objects.entity_ids import EventId, UserId, VenueId
from ...domain.value_objects.money import Money
from ..orm.event_model import EventModel
from ._errors import translate_integrity_errors


logger = logging.getLogger(__name__)

EVENT_CONFLICT = "Event conflicts with existing data"
EVENT_CONSTRAINT_MESSAGES = {
    "slug": "Event with this slug already exists",
    "booked_count_within_capacity": "Capacity cannot drop below the seats already booked",
    "dates_ordered": "Event must start before it ends",
}


class EventRepositoryImpl(IEventRepository):
    """Repository implementation for Event aggregate.

    ``booked_count`` is only ever written by ``reserve_seats`` and
    ``release_seats``, each a single conditional UPDATE, so concurrent
    bookings on the same row serialise in the database and bookings on
    different events never contend.
    """

    def __init__(self, session: Session):
        self.session = session

    async def get_by_id(self, event_id: EventId) -> Optional[Event]:
        """Get event by ID, always re-read from the database"""
        model = (
            self.session.query(EventModel)
            .populate_existing()
            .filter(EventModel.id == event_id.value)
            .first()
        )
        return self._map_to_entity(model) if model else None

    async def get_by_slug(self, slug: str) -> Optional[Event]:
        """Get event by slug"""
        model = self.session.query(EventModel).populate_existing().filter(EventModel.slug == slug).first()
        return self._map_to_entity(model) if model else None

    async def exists_by_slug(self, slug: str) -> bool:
        return self.session.query(EventModel.id).filter(EventModel.slug == slug).first() is not None

    async def add(self, event: Event) -> Event:
        """Add a new event"""
        self.session.add(self._create_model_from_entity(event))
        with translate_integrity_errors(EVENT_CONFLICT, EVENT_CONSTRAINT_MESSAGES):
            self.session.flush()
        return event

    async def update(self, event: Event) -> Event:
        """Update an existing event"""
        existing = self.session.query(EventModel).filter(EventModel.id == event.id.value).first()
        if existing:
            self._update_model_from_entity(existing, event)
            with translate_integrity_errors(EVENT_CONFLICT, EVENT_CONSTRAINT_MESSAGES):
                self.session.flush()
        return event

    async def delete(self, event_id: EventId) -> None:
        """Delete event"""
        model = self.session.query(EventModel).filter(EventModel.id == event_id.value).first()
        if model:
            self.session.delete(model)
            with translate_integrity_errors("Event still has bookings"):
                self.session.flush()

    async def list(self, event_filter: EventFilter, offset: int, limit: int) -> List[Event]:
        """List events ordered by start date"""
        models = (
            self._filtered(event_filter)
            .order_by(EventModel.start_date.asc(), EventModel.id)
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [self._map_to_entity(model) for model in models]

    async def count(self, event_filter: EventFilter) -> int:
        return self._filtered(event_filter).count()

    async def reserve_seats(self, event_id: EventId, seats: int, now: datetime) -> bool:
        """Conditional increment; the WHERE clause is the capacity check"""
        result = self.session.execute(
            update(EventModel)
            .where(
                EventModel.id == event_id.value,
                EventModel.status == EventStatus.PUBLISHED,
                EventModel.start_date > now,
                EventModel.booked_count + seats <= EventModel.capacity,
            )
            .values(booked_count=EventModel.booked_count + seats, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def release_seats(self, event_id: EventId, seats: int) -> bool:
        """Conditional decrement, floored at zero"""
        result = self.session.execute(
            update(EventModel)
            .where(EventModel.id == event_id.value, EventModel.booked_count >= seats)
            .values(booked_count=EventModel.booked_count - seats)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return True

        # Fewer seats booked than being released: the counter drifted somewhere
        self.session.execute(
            update(EventModel)
            .where(EventModel.id == event_id.value)
            .values(booked_count=case((EventModel.booked_count >= seats, EventModel.booked_count - seats), else_=0))
            .execution_options(synchronize_session=False)
        )
        return False

    def _filtered(self, event_filter: EventFilter):
        query = self.session.query(EventModel)
        if event_filter.status is not None:
            query = query.filter(EventModel.status == event_filter.status)
        if event_filter.category is not None:
            query = query.filter(EventModel.category == event_filter.category)
        if event_filter.organizer_id is not None:
            query = query.filter(EventModel.organizer_id == event_filter.organizer_id.value)
        return query

    def _create_model_from_entity(self, event: Event) -> EventModel:
        """Create ORM model from domain entity"""
        return EventModel(
            id=event.id.value,
            slug=event.slug,
            title=event.title,
            description=event.description,
            category=event.category,
            status=event.status,
            start_date=event.start_date,
            end_date=event.end_date,
            price=event.price.amount,
            currency=event.price.currency,
            capacity=event.capacity,
            booked_count=event.booked_count,
            organizer_id=event.organizer_id.value,
            venue_id=event.venue_id.value,
            image_url=event.image_url,
            video_url=event.video_url,
            published_at=event.published_at,
            created_at=event.created_at,
            updated_at=event.updated_at,
        )

    def _update_model_from_entity(self, model: EventModel, event: Event) -> None:
        """Update ORM model from domain entity (booked_count excluded)"""
        model.slug = event.slug
        model.title = event.title
        model.description = event.description
        model.category = event.category
        model.status = event.status
        model.start_date = event.start_date
        model.end_date = event.end_date
        model.price = event.price.amount
        model.currency = event.price.currency
        model.capacity = event.capacity
        model.venue_id = event.venue_id.value
        model.image_url = event.image_url
        model.video_url = event.video_url
        model.published_at = event.published_at
        model.updated_at = event.updated_at

    def _map_to_entity(self, model: EventModel) -> Event:
        """Map ORM model to domain entity"""
        return Event(
            id=EventId(model.id),
            slug=model.slug,
            title=model.title,
            description=model.description,
            category=model.category,
            status=model.status,
            start_date=ensure_utc(model.start_date),
            end_date=ensure_utc(model.end_date),
            price=Money(Decimal(model.price), model.currency),
            capacity=model.capacity,
            booked_count=model.booked_count,
            organizer_id=UserId(model.organizer_id),
            venue_id=VenueId(model.venue_id),
            image_url=model.image_url,
            video_url=model.video_url,
            published_at=ensure_utc(model.published_at),
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
        )

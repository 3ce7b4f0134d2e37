"""Event catalogue management use cases (organizers and administrators)"""

import logging

from ...domain.entities.event import Event
from ...domain.enums import EventStatus
from ...domain.errors import ConflictError, InvalidStateTransitionError, NotFoundError, ValidationError
from ...domain.policies import Action, Subject, authorize
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import EventId, VenueId
from ...domain.value_objects.money import Money
from ..dtos.event_dtos import CreateEventDto, EventDto, UpdateEventDto
from ._common import log_domain_events


logger = logging.getLogger(__name__)

# Fields that may be left out of an edit but never set to null
_REQUIRED_FIELDS = {"title", "slug", "description", "category", "start_date", "end_date", "price", "capacity", "venue_id"}


async def _load_event(unit_of_work: IUnitOfWork, event_id: EventId) -> Event:
    event = await unit_of_work.events.get_by_id(event_id)
    if event is None:
        raise NotFoundError("Event", event_id)
    return event


async def _ensure_venue_exists(unit_of_work: IUnitOfWork, venue_id: VenueId) -> None:
    if not await unit_of_work.venues.exists(venue_id):
        raise ValidationError("Venue does not exist", errors=[{"field": "venue_id", "message": "unknown venue"}])


class CreateEventUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, subject: Subject, request: CreateEventDto) -> EventDto:
        authorize(subject, Action.CREATE_EVENT)
        venue_id = VenueId(request.venue_id)

        async with self.unit_of_work:
            await _ensure_venue_exists(self.unit_of_work, venue_id)
            if await self.unit_of_work.events.exists_by_slug(request.slug):
                raise ConflictError(f"Event with slug '{request.slug}' already exists")

            event = Event.create(
                slug=request.slug,
                title=request.title,
                description=request.description,
                category=request.category,
                start_date=request.start_date,
                end_date=request.end_date,
                price=Money(request.price, request.currency.upper()),
                capacity=request.capacity,
                organizer_id=subject.id,
                venue_id=venue_id,
                image_url=request.image_url,
                video_url=request.video_url,
            )
            await self.unit_of_work.events.add(event)
            await self.unit_of_work.audit_logs.record(
                "event.created", user_id=subject.id, resource_type="event", resource_id=str(event.id)
            )
            await self.unit_of_work.commit()

        logger.info("Event created", extra={"event_id": str(event.id), "organizer_id": str(subject.id)})
        return EventDto.from_entity(event)


class UpdateEventUseCase:
    """Partial edit by the organizer or an administrator.

    Existing bookings keep the price they were made at; capacity cannot drop
    below the seats already booked.
    """

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, subject: Subject, event_id: EventId, request: UpdateEventDto) -> EventDto:
        changes = request.model_dump(exclude_unset=True)
        nulls = sorted(name for name in _REQUIRED_FIELDS & changes.keys() if changes[name] is None)
        if nulls:
            raise ValidationError(
                "Required fields cannot be cleared",
                errors=[{"field": name, "message": "cannot be null"} for name in nulls],
            )

        async with self.unit_of_work:
            event = await _load_event(self.unit_of_work, event_id)
            authorize(subject, Action.EDIT_EVENT, event)

            if "slug" in changes and changes["slug"] != event.slug:
                if await self.unit_of_work.events.exists_by_slug(changes["slug"]):
                    raise ConflictError(f"Event with slug '{changes['slug']}' already exists")
            if "venue_id" in changes:
                changes["venue_id"] = VenueId(changes["venue_id"])
                await _ensure_venue_exists(self.unit_of_work, changes["venue_id"])
            if "price" in changes:
                changes["price"] = Money(changes["price"], event.price.currency)

            event.update_details(**changes)
            await self.unit_of_work.events.update(event)
            await self.unit_of_work.audit_logs.record(
                "event.updated",
                user_id=subject.id,
                resource_type="event",
                resource_id=str(event.id),
                details={"fields": sorted(changes)},
            )
            await self.unit_of_work.commit()

        return EventDto.from_entity(event)


class ChangeEventStatusUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, subject: Subject, event_id: EventId, target: EventStatus) -> EventDto:
        async with self.unit_of_work:
            event = await _load_event(self.unit_of_work, event_id)
            authorize(subject, Action.CHANGE_EVENT_STATUS, event)

            previous = event.status
            if target == EventStatus.PUBLISHED:
                event.publish()
            elif target == EventStatus.CANCELLED:
                event.cancel()
            elif target == EventStatus.COMPLETED:
                event.complete()
            else:
                raise InvalidStateTransitionError(event.status, target)
            if event.status == previous:
                return EventDto.from_entity(event)

            await self.unit_of_work.events.update(event)
            await self.unit_of_work.audit_logs.record(
                "event.status_changed",
                user_id=subject.id,
                resource_type="event",
                resource_id=str(event.id),
                details={"from": previous.value, "to": event.status.value},
            )
            await self.unit_of_work.commit()

        log_domain_events(event.get_events())
        return EventDto.from_entity(event)


class DeleteEventUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, subject: Subject, event_id: EventId) -> None:
        async with self.unit_of_work:
            event = await _load_event(self.unit_of_work, event_id)
            authorize(subject, Action.DELETE_EVENT, event)

            active = await self.unit_of_work.bookings.count_active_for_event(event.id)
            if active:
                raise ConflictError(f"Event has {active} active booking(s); cancel the event instead")

            await self.unit_of_work.events.delete(event.id)
            await self.unit_of_work.audit_logs.record(
                "event.deleted",
                user_id=subject.id,
                resource_type="event",
                resource_id=str(event.id),
                details={"slug": event.slug},
            )
            await self.unit_of_work.commit()

        logger.info("Event deleted", extra={"event_id": str(event.id), "deleted_by": str(subject.id)})

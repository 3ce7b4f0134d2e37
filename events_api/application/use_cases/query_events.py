"""Event catalogue read use cases"""

from typing import Optional

from ...domain.entities.event import Event
from ...domain.enums import EventCategory, EventStatus
from ...domain.errors import NotFoundError
from ...domain.policies import Action, Subject, authorize, can_perform
from ...domain.repositories.event_repository import EventFilter
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import EventId
from ..dtos.common import Page, PaginationMeta, page_offset
from ..dtos.event_dtos import EventDto


def _is_visible(event: Event, subject: Optional[Subject]) -> bool:
    if event.status == EventStatus.PUBLISHED:
        return True
    return subject is not None and bool(can_perform(subject, Action.VIEW_UNPUBLISHED_EVENTS, event))


class GetEventUseCase:
    """Fetch one event by id or slug.

    Events that are not published are reported as missing to anyone other
    than their organizer or an administrator.
    """

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(
        self,
        subject: Optional[Subject] = None,
        event_id: Optional[EventId] = None,
        slug: Optional[str] = None,
    ) -> EventDto:
        async with self.unit_of_work:
            if event_id is not None:
                event = await self.unit_of_work.events.get_by_id(event_id)
            else:
                event = await self.unit_of_work.events.get_by_slug(slug or "")

        if event is None or not _is_visible(event, subject):
            raise NotFoundError("Event", event_id or slug)
        return EventDto.from_entity(event)


class ListEventsUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(
        self,
        subject: Optional[Subject] = None,
        page: int = 1,
        limit: int = 20,
        status: Optional[EventStatus] = None,
        category: Optional[EventCategory] = None,
        include_unpublished: bool = False,
    ) -> Page[EventDto]:
        """Public listing shows published events only. With ``include_unpublished``
        administrators see every event and organizers see their own."""
        if include_unpublished:
            authorize(subject, Action.VIEW_UNPUBLISHED_EVENTS)
            organizer_id = None if subject.is_admin else subject.id
            event_filter = EventFilter(status=status, category=category, organizer_id=organizer_id)
        else:
            event_filter = EventFilter(status=EventStatus.PUBLISHED, category=category)

        async with self.unit_of_work:
            events = await self.unit_of_work.events.list(event_filter, page_offset(page, limit), limit)
            total = await self.unit_of_work.events.count(event_filter)

        return Page[EventDto](
            data=[EventDto.from_entity(event) for event in events],
            meta=PaginationMeta(page=page, limit=limit, total=total),
        )

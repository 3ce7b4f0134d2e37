from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from events_api.application.dtos.event_dtos import CreateEventDto, UpdateEventDto
from events_api.application.use_cases.create_booking import CreateBookingUseCase
from events_api.application.use_cases.manage_events import (
    ChangeEventStatusUseCase, CreateEventUseCase, DeleteEventUseCase, UpdateEventUseCase,
)
from events_api.application.use_cases.query_events import GetEventUseCase, ListEventsUseCase
from events_api.core.clock import utcnow
from events_api.domain.enums import EventCategory, EventStatus
from events_api.domain.errors import (
    BookingNotAllowedError, ConflictError, ForbiddenError, InvalidStateTransitionError, NotFoundError,
    ValidationError,
)
from events_api.domain.value_objects.entity_ids import BookingId
from events_api.infrastructure.orm import AuditLogModel


def create_request(venue, **overrides) -> CreateEventDto:
    start = utcnow() + timedelta(days=14)
    values = dict(
        title="Summer Festival",
        slug="summer-festival",
        description="Three stages of live music",
        category=EventCategory.FESTIVAL,
        start_date=start,
        end_date=start + timedelta(hours=8),
        price=Decimal("49.99"),
        capacity=100,
        venue_id=venue.value,
    )
    values.update(overrides)
    return CreateEventDto(**values)


class TestCreateEvent:

    async def test_organizer_creates_draft(self, make_uow, subjects, venue, session_factory):
        event = await CreateEventUseCase(make_uow()).execute(subjects["organizer"], create_request(venue))

        assert event.status == EventStatus.DRAFT
        assert event.organizer_id == subjects["organizer"].id.value
        assert event.remaining_seats == 100
        session = session_factory()
        try:
            assert session.query(AuditLogModel).filter(AuditLogModel.action == "event.created").count() == 1
        finally:
            session.close()

    async def test_users_cannot_create(self, make_uow, subjects, venue):
        with pytest.raises(ForbiddenError):
            await CreateEventUseCase(make_uow()).execute(subjects["user"], create_request(venue))

    async def test_duplicate_slug(self, make_uow, subjects, venue):
        await CreateEventUseCase(make_uow()).execute(subjects["organizer"], create_request(venue))
        with pytest.raises(ConflictError):
            await CreateEventUseCase(make_uow()).execute(subjects["admin"], create_request(venue))

    async def test_unknown_venue(self, make_uow, subjects, venue):
        request = create_request(venue, venue_id=uuid4())
        with pytest.raises(ValidationError):
            await CreateEventUseCase(make_uow()).execute(subjects["organizer"], request)

    async def test_dates_must_be_ordered(self, make_uow, subjects, venue):
        start = utcnow() + timedelta(days=3)
        request = create_request(venue, start_date=start, end_date=start - timedelta(hours=1))
        with pytest.raises(ValidationError):
            await CreateEventUseCase(make_uow()).execute(subjects["organizer"], request)


class TestUpdateEvent:

    async def test_partial_update(self, make_uow, subjects, event_factory):
        event = await event_factory(price="10.00")

        updated = await UpdateEventUseCase(make_uow()).execute(
            subjects["organizer"], event.id, UpdateEventDto(title="Renamed show", price=Decimal("15.00"))
        )

        assert updated.title == "Renamed show"
        assert updated.price == Decimal("15.00")
        assert updated.slug == event.slug

    async def test_price_change_leaves_bookings_alone(self, make_uow, subjects, event_factory):
        event = await event_factory(price="10.00")
        booking = await CreateBookingUseCase(make_uow()).execute(subjects["user"], event.id, 2)

        await UpdateEventUseCase(make_uow()).execute(
            subjects["organizer"], event.id, UpdateEventDto(price=Decimal("99.00"))
        )

        stored = await make_uow().bookings.get_by_id(BookingId(booking.id))
        assert stored.total_price.amount == Decimal("20.00")

    async def test_capacity_cannot_drop_below_booked(self, make_uow, subjects, event_factory):
        event = await event_factory(capacity=5)
        await CreateBookingUseCase(make_uow()).execute(subjects["user"], event.id, 3)

        with pytest.raises(ValidationError):
            await UpdateEventUseCase(make_uow()).execute(
                subjects["organizer"], event.id, UpdateEventDto(capacity=2)
            )
        updated = await UpdateEventUseCase(make_uow()).execute(
            subjects["organizer"], event.id, UpdateEventDto(capacity=3)
        )
        assert updated.remaining_seats == 0

    async def test_capacity_edit_racing_a_booking(self, make_uow, subjects, event_factory, reload_event):
        event = await event_factory(capacity=5)
        editor = make_uow()
        stale = await editor.events.get_by_id(event.id)
        await CreateBookingUseCase(make_uow()).execute(subjects["user"], event.id, 3)

        stale.update_details(capacity=2)
        with pytest.raises(ConflictError) as exc_info:
            async with editor:
                await editor.events.update(stale)

        assert exc_info.value.message == "Capacity cannot drop below the seats already booked"
        current = await reload_event(event)
        assert (current.capacity, current.booked_count) == (5, 3)

    async def test_required_fields_cannot_be_cleared(self, make_uow, subjects, event_factory):
        event = await event_factory()
        with pytest.raises(ValidationError):
            await UpdateEventUseCase(make_uow()).execute(
                subjects["organizer"], event.id, UpdateEventDto(title=None)
            )

    async def test_other_organizer_forbidden(self, make_uow, subjects, event_factory):
        event = await event_factory()
        with pytest.raises(ForbiddenError):
            await UpdateEventUseCase(make_uow()).execute(
                subjects["other_organizer"], event.id, UpdateEventDto(title="Taken over")
            )


class TestEventStatus:

    async def test_publish_and_cancel(self, make_uow, subjects, event_factory):
        event = await event_factory(status=EventStatus.DRAFT)
        def change(target):
            return ChangeEventStatusUseCase(make_uow()).execute(subjects["organizer"], event.id, target)

        assert (await change(EventStatus.PUBLISHED)).status == EventStatus.PUBLISHED
        assert (await change(EventStatus.CANCELLED)).status == EventStatus.CANCELLED

    async def test_repeat_cancel_changes_nothing(self, make_uow, subjects, event_factory, session_factory):
        event = await event_factory()
        first = await ChangeEventStatusUseCase(make_uow()).execute(
            subjects["organizer"], event.id, EventStatus.CANCELLED
        )

        again = await ChangeEventStatusUseCase(make_uow()).execute(
            subjects["organizer"], event.id, EventStatus.CANCELLED
        )

        assert again.status == EventStatus.CANCELLED
        assert again.updated_at == first.updated_at
        session = session_factory()
        try:
            audited = session.query(AuditLogModel).filter(AuditLogModel.action == "event.status_changed").count()
        finally:
            session.close()
        assert audited == 1

    async def test_completed_is_terminal(self, make_uow, subjects, event_factory, reload_event):
        event = await event_factory(status=EventStatus.COMPLETED)

        with pytest.raises(InvalidStateTransitionError):
            await ChangeEventStatusUseCase(make_uow()).execute(subjects["admin"], event.id, EventStatus.CANCELLED)
        assert (await reload_event(event)).status == EventStatus.COMPLETED

    @pytest.mark.parametrize("status", [EventStatus.PUBLISHED, EventStatus.CANCELLED, EventStatus.COMPLETED])
    async def test_publish_only_from_draft(self, make_uow, subjects, event_factory, status):
        event = await event_factory(status=status)
        with pytest.raises(InvalidStateTransitionError):
            await ChangeEventStatusUseCase(make_uow()).execute(subjects["organizer"], event.id, EventStatus.PUBLISHED)

    async def test_publish_sets_timestamp(self, make_uow, subjects, event_factory):
        event = await event_factory(status=EventStatus.DRAFT)
        published = await ChangeEventStatusUseCase(make_uow()).execute(
            subjects["organizer"], event.id, EventStatus.PUBLISHED
        )
        assert published.published_at is not None

    async def test_back_to_draft_is_refused(self, make_uow, subjects, event_factory):
        event = await event_factory()
        with pytest.raises(InvalidStateTransitionError):
            await ChangeEventStatusUseCase(make_uow()).execute(subjects["organizer"], event.id, EventStatus.DRAFT)

    async def test_cancelled_event_stops_bookings(self, make_uow, subjects, event_factory):
        event = await event_factory()
        await ChangeEventStatusUseCase(make_uow()).execute(subjects["organizer"], event.id, EventStatus.CANCELLED)

        with pytest.raises(BookingNotAllowedError):
            await CreateBookingUseCase(make_uow()).execute(subjects["user"], event.id, 1)


class TestDeleteEvent:

    async def test_delete_unbooked_event(self, make_uow, subjects, event_factory, reload_event):
        event = await event_factory(status=EventStatus.DRAFT)

        await DeleteEventUseCase(make_uow()).execute(subjects["organizer"], event.id)

        assert await reload_event(event) is None

    async def test_active_bookings_block_delete(self, make_uow, subjects, event_factory):
        event = await event_factory()
        await CreateBookingUseCase(make_uow()).execute(subjects["user"], event.id, 1)

        with pytest.raises(ConflictError):
            await DeleteEventUseCase(make_uow()).execute(subjects["admin"], event.id)

    async def test_users_cannot_delete(self, make_uow, subjects, event_factory):
        event = await event_factory()
        with pytest.raises(ForbiddenError):
            await DeleteEventUseCase(make_uow()).execute(subjects["user"], event.id)


class TestQueryEvents:

    async def test_drafts_hidden_from_public(self, make_uow, subjects, event_factory):
        draft = await event_factory(status=EventStatus.DRAFT)

        for subject in (None, subjects["user"], subjects["other_organizer"]):
            with pytest.raises(NotFoundError):
                await GetEventUseCase(make_uow()).execute(subject, event_id=draft.id)

        for name in ("organizer", "admin"):
            found = await GetEventUseCase(make_uow()).execute(subjects[name], event_id=draft.id)
            assert found.id == draft.id.value

    async def test_get_by_slug(self, make_uow, event_factory):
        event = await event_factory()
        found = await GetEventUseCase(make_uow()).execute(slug=event.slug)
        assert found.id == event.id.value

    async def test_public_listing_shows_published_only(self, make_uow, event_factory):
        later = await event_factory(starts_in=timedelta(days=20))
        sooner = await event_factory(starts_in=timedelta(days=10))
        await event_factory(status=EventStatus.DRAFT)

        page = await ListEventsUseCase(make_uow()).execute()

        assert page.meta.total == 2
        assert [event.id for event in page.data] == [sooner.id.value, later.id.value]

    async def test_organizer_sees_own_unpublished(self, make_uow, subjects, users, event_factory):
        await event_factory(status=EventStatus.DRAFT)
        await event_factory(status=EventStatus.DRAFT, organizer=users["other_organizer"])

        own = await ListEventsUseCase(make_uow()).execute(subjects["organizer"], include_unpublished=True)
        everything = await ListEventsUseCase(make_uow()).execute(subjects["admin"], include_unpublished=True)

        assert own.meta.total == 1
        assert everything.meta.total == 2

    async def test_users_cannot_list_unpublished(self, make_uow, subjects):
        with pytest.raises(ForbiddenError):
            await ListEventsUseCase(make_uow()).execute(subjects["user"], include_unpublished=True)

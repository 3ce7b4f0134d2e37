import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import update

from events_api.application.use_cases.cancel_booking import CancelBookingUseCase
from events_api.application.use_cases.create_booking import CreateBookingUseCase
from events_api.application.use_cases.query_bookings import GetBookingUseCase, ListBookingsUseCase
from events_api.domain.enums import BookingStatus, EventStatus, UserStatus
from events_api.domain.errors import (
    AlreadyCancelledError, BookingNotAllowedError, ForbiddenError, InsufficientCapacityError, NotFoundError,
    ValidationError,
)
from events_api.domain.value_objects.entity_ids import BookingId, EventId
from events_api.infrastructure.orm import AuditLogModel, EventModel, UserModel
from events_api.infrastructure.repositories.unit_of_work_impl import UnitOfWorkImpl


async def book(make_uow, subject, event, seats=1, user_id=None, status=BookingStatus.CONFIRMED):
    return await CreateBookingUseCase(make_uow(), status).execute(subject, event.id, seats, user_id)


async def cancel(make_uow, subject, booking):
    return await CancelBookingUseCase(make_uow()).execute(subject, BookingId(booking.id))


class TestCreateBooking:

    async def test_seats_are_reserved(self, make_uow, subjects, event_factory, reload_event):
        event = await event_factory(capacity=5, price="12.50")

        booking = await book(make_uow, subjects["user"], event, seats=2)

        assert booking.status == BookingStatus.CONFIRMED
        assert booking.total_price == Decimal("25.00")
        assert (await reload_event(event)).booked_count == 2

    async def test_pending_bookings_hold_seats(self, make_uow, subjects, event_factory, reload_event):
        event = await event_factory(capacity=2)

        booking = await book(make_uow, subjects["user"], event, status=BookingStatus.PENDING)

        assert booking.status == BookingStatus.PENDING
        assert (await reload_event(event)).booked_count == 1

    async def test_worked_example(self, make_uow, subjects, event_factory, reload_event):
        """Capacity 3: 2 seats, then 2 more is refused, then 1 fits; cancelling frees 2"""
        event = await event_factory(capacity=3)
        user = subjects["user"]

        first = await book(make_uow, user, event, seats=2)
        with pytest.raises(InsufficientCapacityError) as exc_info:
            await book(make_uow, subjects["other_user"], event, seats=2)
        assert exc_info.value.remaining == 1
        await book(make_uow, subjects["other_user"], event, seats=1)
        assert (await reload_event(event)).booked_count == 3

        await cancel(make_uow, user, first)
        assert (await reload_event(event)).booked_count == 1

    async def test_refused_booking_changes_nothing(self, make_uow, subjects, event_factory, reload_event):
        event = await event_factory(capacity=1)
        await book(make_uow, subjects["user"], event)

        with pytest.raises(InsufficientCapacityError):
            await book(make_uow, subjects["other_user"], event)

        assert (await reload_event(event)).booked_count == 1
        page = await ListBookingsUseCase(make_uow()).execute(subjects["other_user"])
        assert page.meta.total == 0

    @pytest.mark.parametrize("status", [EventStatus.DRAFT, EventStatus.CANCELLED, EventStatus.COMPLETED])
    async def test_event_must_be_published(self, make_uow, subjects, event_factory, status):
        event = await event_factory(status=status)
        with pytest.raises(BookingNotAllowedError):
            await book(make_uow, subjects["user"], event)

    async def test_started_event(self, make_uow, subjects, event_factory):
        event = await event_factory(starts_in=timedelta(hours=-1))
        with pytest.raises(BookingNotAllowedError) as exc_info:
            await book(make_uow, subjects["user"], event)
        assert exc_info.value.message == "Event has already started"

    async def test_unknown_event(self, make_uow, subjects):
        with pytest.raises(NotFoundError):
            await CreateBookingUseCase(make_uow()).execute(subjects["user"], EventId.generate(), 1)

    async def test_more_seats_than_the_event_holds(self, make_uow, subjects, event_factory, reload_event):
        event = await event_factory(capacity=5)

        with pytest.raises(InsufficientCapacityError) as exc_info:
            await book(make_uow, subjects["user"], event, seats=10**30)

        assert exc_info.value.remaining == 5
        assert (await reload_event(event)).booked_count == 0

    async def test_zero_seats(self, make_uow, subjects, event_factory):
        event = await event_factory()
        with pytest.raises(ValidationError):
            await book(make_uow, subjects["user"], event, seats=0)

    async def test_users_cannot_book_for_others(self, make_uow, subjects, users, event_factory):
        event = await event_factory()
        with pytest.raises(ForbiddenError):
            await book(make_uow, subjects["user"], event, user_id=users["other_user"].id)

    async def test_admin_books_for_a_user(self, make_uow, subjects, users, event_factory):
        event = await event_factory()

        booking = await book(make_uow, subjects["admin"], event, user_id=users["user"].id)

        assert booking.user_id == users["user"].id.value

    async def test_admin_cannot_book_for_suspended_user(
        self, make_uow, subjects, users, event_factory, session_factory,
    ):
        event = await event_factory()
        session = session_factory()
        session.execute(
            update(UserModel).where(UserModel.id == users["user"].id.value).values(status=UserStatus.SUSPENDED)
        )
        session.commit()
        session.close()

        with pytest.raises(NotFoundError):
            await book(make_uow, subjects["admin"], event, user_id=users["user"].id)


async def test_concurrent_bookings_never_oversell(session_factory, subjects, event_factory, reload_event):
    capacity, attempts = 3, 8
    event = await event_factory(capacity=capacity)
    barrier = threading.Barrier(attempts)
    subject = subjects["user"]

    def attempt() -> str:
        session = session_factory()
        try:
            barrier.wait(timeout=10)
            asyncio.run(CreateBookingUseCase(UnitOfWorkImpl(session)).execute(subject, event.id, 1))
            return "booked"
        except InsufficientCapacityError:
            return "sold out"
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=attempts) as pool:
        outcomes = list(pool.map(lambda _: attempt(), range(attempts)))

    assert outcomes.count("booked") == capacity
    assert outcomes.count("sold out") == attempts - capacity
    assert (await reload_event(event)).booked_count == capacity


class TestCancelBooking:

    async def test_cancel_releases_seats(self, make_uow, subjects, event_factory, reload_event):
        event = await event_factory(capacity=4)
        booking = await book(make_uow, subjects["user"], event, seats=3)

        cancelled = await cancel(make_uow, subjects["user"], booking)

        assert cancelled.status == BookingStatus.CANCELLED
        assert (await reload_event(event)).booked_count == 0

    async def test_second_cancel_releases_nothing(self, make_uow, subjects, event_factory, reload_event):
        event = await event_factory(capacity=4)
        kept = await book(make_uow, subjects["other_user"], event, seats=1)
        booking = await book(make_uow, subjects["user"], event, seats=2)
        await cancel(make_uow, subjects["user"], booking)

        with pytest.raises(AlreadyCancelledError) as exc_info:
            await cancel(make_uow, subjects["user"], booking)

        assert exc_info.value.booking.status == BookingStatus.CANCELLED
        assert (await reload_event(event)).booked_count == kept.seats

    async def test_only_owner_or_admin_cancels(self, make_uow, subjects, event_factory):
        event = await event_factory()
        booking = await book(make_uow, subjects["user"], event)

        for name in ("other_user", "organizer"):
            with pytest.raises(ForbiddenError):
                await cancel(make_uow, subjects[name], booking)

        cancelled = await cancel(make_uow, subjects["admin"], booking)
        assert cancelled.status == BookingStatus.CANCELLED

    async def test_unknown_booking(self, make_uow, subjects):
        with pytest.raises(NotFoundError):
            await CancelBookingUseCase(make_uow()).execute(subjects["user"], BookingId.generate())

    async def test_cancel_after_event_cancelled(self, make_uow, subjects, event_factory, reload_event, session_factory):
        event = await event_factory(capacity=2)
        booking = await book(make_uow, subjects["user"], event, seats=2)
        session = session_factory()
        session.execute(
            update(EventModel).where(EventModel.id == event.id.value).values(status=EventStatus.CANCELLED)
        )
        session.commit()
        session.close()

        await cancel(make_uow, subjects["user"], booking)

        assert (await reload_event(event)).booked_count == 0

    async def test_counter_drift_is_floored_and_audited(
        self, make_uow, subjects, event_factory, reload_event, session_factory,
    ):
        event = await event_factory(capacity=5)
        booking = await book(make_uow, subjects["user"], event, seats=2)
        session = session_factory()
        session.execute(update(EventModel).where(EventModel.id == event.id.value).values(booked_count=1))
        session.commit()
        session.close()

        cancelled = await cancel(make_uow, subjects["user"], booking)

        assert cancelled.status == BookingStatus.CANCELLED
        assert (await reload_event(event)).booked_count == 0
        session = session_factory()
        try:
            alarms = session.query(AuditLogModel).filter(
                AuditLogModel.action == "integrity.booked_count_underflow"
            ).all()
        finally:
            session.close()
        assert [alarm.resource_id for alarm in alarms] == [str(event.id)]


class TestQueryBookings:

    async def test_owner_and_admin_can_view(self, make_uow, subjects, event_factory):
        event = await event_factory()
        booking = await book(make_uow, subjects["user"], event)

        for name in ("user", "admin"):
            found = await GetBookingUseCase(make_uow()).execute(subjects[name], BookingId(booking.id))
            assert found.id == booking.id
        with pytest.raises(ForbiddenError):
            await GetBookingUseCase(make_uow()).execute(subjects["other_user"], BookingId(booking.id))

    async def test_list_is_scoped_to_caller(self, make_uow, subjects, event_factory):
        event = await event_factory()
        await book(make_uow, subjects["user"], event)
        await book(make_uow, subjects["user"], event)
        await book(make_uow, subjects["other_user"], event)

        mine = await ListBookingsUseCase(make_uow()).execute(subjects["user"], limit=1)
        assert mine.meta.total == 2
        assert len(mine.data) == 1

        everyone = await ListBookingsUseCase(make_uow()).execute(subjects["admin"], all_users=True)
        assert everyone.meta.total == 3

    async def test_all_users_requires_admin(self, make_uow, subjects):
        with pytest.raises(ForbiddenError):
            await ListBookingsUseCase(make_uow()).execute(subjects["user"], all_users=True)

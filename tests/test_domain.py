"""Entity and value object behaviour"""

from datetime import timedelta
from decimal import Decimal

import pytest

from events_api.core.clock import utcnow
from events_api.domain.entities.booking import Booking
from events_api.domain.entities.event import Event
from events_api.domain.entities.user import User
from events_api.domain.enums import BookingStatus, EventCategory, EventStatus, UserRole, UserStatus
from events_api.domain.errors import AlreadyCancelledError, InvalidStateTransitionError, ValidationError
from events_api.domain.events.event_events import EventCancelled, EventPublished
from events_api.domain.policies import can_transition
from events_api.domain.value_objects.email import Email
from events_api.domain.value_objects.entity_ids import EventId, UserId, VenueId
from events_api.domain.value_objects.money import Money


def make_event(**overrides) -> Event:
    start = utcnow() + timedelta(days=7)
    values = dict(
        slug="jazz-night",
        title="Jazz Night",
        description="An evening of live jazz",
        category=EventCategory.MUSIC,
        start_date=start,
        end_date=start + timedelta(hours=2),
        price=Money(Decimal("25.00")),
        capacity=3,
        organizer_id=UserId.generate(),
        venue_id=VenueId.generate(),
    )
    values.update(overrides)
    return Event.create(**values)


class TestMoney:

    def test_amount_is_quantized_to_cents(self):
        assert Money(Decimal("10.005")).amount == Decimal("10.01")

    def test_rejects_float(self):
        with pytest.raises(TypeError):
            Money(10.5)

    def test_rejects_negative(self):
        with pytest.raises(ValueError):
            Money(Decimal("-1"))

    def test_times(self):
        assert Money(Decimal("19.99")).times(3) == Money(Decimal("59.97"))


class TestEmail:

    def test_normalised_to_lower_case(self):
        assert Email("  Alice@Example.COM ") == Email("alice@example.com")

    def test_invalid_address(self):
        with pytest.raises(ValueError):
            Email("not-an-email")


def test_entity_ids_compare_by_value():
    user_id = UserId.generate()
    assert UserId.from_str(str(user_id)) == user_id
    with pytest.raises(ValueError):
        EventId("not-a-uuid")


class TestUser:

    def test_create_defaults(self):
        user = User.create(Email("a@example.com"), "hash", "Alice", "Smith")
        assert user.role == UserRole.USER
        assert user.status == UserStatus.ACTIVE
        assert user.is_active
        assert user.full_name == "Alice Smith"

    def test_short_name_rejected(self):
        with pytest.raises(ValidationError):
            User.create(Email("a@example.com"), "hash", "A", "Smith")

    def test_password_hash_not_in_repr(self):
        user = User.create(Email("a@example.com"), "secret-hash", "Alice", "Smith")
        assert "secret-hash" not in repr(user)

    def test_deleted_user_cannot_be_restored(self):
        user = User.create(Email("a@example.com"), "hash", "Alice", "Smith")
        user.change_status(UserStatus.DELETED)
        with pytest.raises(ValidationError):
            user.change_status(UserStatus.ACTIVE)


class TestEventLifecycle:

    def test_new_event_is_draft(self):
        event = make_event()
        assert event.status == EventStatus.DRAFT
        assert event.booked_count == 0
        assert not event.is_open_for_booking()

    def test_publish_then_complete(self):
        event = make_event()
        event.publish()
        assert event.is_open_for_booking()
        assert event.published_at is not None
        assert isinstance(event.get_events()[0], EventPublished)

        event.complete()
        assert event.status == EventStatus.COMPLETED

    def test_completed_event_cannot_be_cancelled(self):
        event = make_event()
        event.publish()
        event.complete()
        with pytest.raises(InvalidStateTransitionError):
            event.cancel()
        assert event.status == EventStatus.COMPLETED

    def test_cancelling_twice_is_a_no_op(self):
        event = make_event()
        event.publish()
        event.cancel()
        cancelled_at = event.updated_at

        event.cancel()

        assert event.status == EventStatus.CANCELLED
        assert event.updated_at == cancelled_at
        assert len([e for e in event.get_events() if isinstance(e, EventCancelled)]) == 1

    def test_draft_cannot_complete(self):
        with pytest.raises(InvalidStateTransitionError):
            make_event().complete()

    @pytest.mark.parametrize("current,target,allowed", [
        (EventStatus.DRAFT, EventStatus.PUBLISHED, True),
        (EventStatus.DRAFT, EventStatus.CANCELLED, True),
        (EventStatus.PUBLISHED, EventStatus.CANCELLED, True),
        (EventStatus.PUBLISHED, EventStatus.DRAFT, False),
        (EventStatus.CANCELLED, EventStatus.PUBLISHED, False),
        (EventStatus.COMPLETED, EventStatus.PUBLISHED, False),
    ])
    def test_transition_table(self, current, target, allowed):
        assert can_transition(current, target) is allowed

    def test_start_must_precede_end(self):
        start = utcnow() + timedelta(days=1)
        with pytest.raises(ValidationError):
            make_event(start_date=start, end_date=start)

    def test_failed_update_leaves_event_unchanged(self):
        event = make_event(capacity=5)
        event.booked_count = 4
        with pytest.raises(ValidationError):
            event.update_details(capacity=3, title="Renamed event")
        assert event.capacity == 5
        assert event.title == "Jazz Night"

    def test_status_not_editable_through_update(self):
        with pytest.raises(ValidationError):
            make_event().update_details(status=EventStatus.PUBLISHED)


class TestBooking:

    def test_price_captured_at_booking_time(self):
        event = make_event()
        event.publish()
        booking = Booking.create(UserId.generate(), event, 2)
        event.update_details(price=Money(Decimal("99.00")))
        assert booking.total_price == Money(Decimal("50.00"))

    def test_zero_seats_rejected(self):
        with pytest.raises(ValidationError):
            Booking.create(UserId.generate(), make_event(), 0)

    def test_cancel_twice(self):
        booking = Booking.create(UserId.generate(), make_event(), 1)
        booking.cancel()
        assert booking.status == BookingStatus.CANCELLED
        with pytest.raises(AlreadyCancelledError) as exc_info:
            booking.cancel()
        assert exc_info.value.booking is booking

    def test_new_booking_cannot_start_cancelled(self):
        with pytest.raises(ValidationError):
            Booking.create(UserId.generate(), make_event(), 1, BookingStatus.CANCELLED)

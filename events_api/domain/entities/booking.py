"""Booking entity with business logic"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ...core.clock import ensure_utc, utcnow
from ..enums import BookingStatus
from ..errors import AlreadyCancelledError, ValidationError
from ..events.booking_events import BookingCancelled, BookingCreated
from ..value_objects.entity_ids import BookingId, EventId, UserId
from ..value_objects.money import Money
from .event import Event


@dataclass
class Booking:
    id: BookingId
    user_id: UserId
    event_id: EventId
    seats: int
    # Captured when the booking is made; later price edits do not touch it
    total_price: Money
    status: BookingStatus = BookingStatus.CONFIRMED
    payment_id: Optional[str] = None
    booking_date: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    # Domain events
    _events: List = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        self.booking_date = ensure_utc(self.booking_date)
        self.updated_at = ensure_utc(self.updated_at)

    @classmethod
    def create(
        cls,
        user_id: UserId,
        event: Event,
        seats: int,
        status: BookingStatus = BookingStatus.CONFIRMED,
    ) -> "Booking":
        """Factory method: price the booking at the event's current price"""
        if seats < 1:
            raise ValidationError(
                "At least one seat must be booked",
                errors=[{"field": "seats", "message": "must be at least 1"}],
            )
        if not status.holds_seats:
            raise ValidationError(f"A new booking cannot be {status.value}")

        now = utcnow()
        booking = cls(
            id=BookingId.generate(),
            user_id=user_id,
            event_id=event.id,
            seats=seats,
            total_price=event.price.times(seats),
            status=status,
            booking_date=now,
            updated_at=now,
        )
        booking._events.append(BookingCreated(
            booking_id=booking.id,
            user_id=user_id,
            event_id=event.id,
            seats=seats,
            total_price=booking.total_price,
        ))
        return booking

    def cancel(self) -> None:
        """Business logic: cancel; terminal statuses never regress"""
        if self.status.is_terminal:
            raise AlreadyCancelledError(self)

        self.status = BookingStatus.CANCELLED
        self.updated_at = utcnow()
        self._events.append(BookingCancelled(
            booking_id=self.id,
            user_id=self.user_id,
            event_id=self.event_id,
            seats=self.seats,
            cancelled_at=self.updated_at,
        ))

    def get_events(self) -> List:
        """Get and clear domain events"""
        events = self._events.copy()
        self._events.clear()
        return events

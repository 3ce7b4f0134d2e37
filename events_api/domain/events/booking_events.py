"""Booking domain events"""

from dataclasses import dataclass
from datetime import datetime

from ..value_objects.money import Money
from ..value_objects.entity_ids import BookingId, EventId, UserId


@dataclass(frozen=True)
class BookingCreated:
    booking_id: BookingId
    user_id: UserId
    event_id: EventId
    seats: int
    total_price: Money


@dataclass(frozen=True)
class BookingCancelled:
    booking_id: BookingId
    user_id: UserId
    event_id: EventId
    seats: int
    cancelled_at: datetime

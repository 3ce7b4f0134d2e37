"""Booking DTOs for API requests and responses"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ...domain.entities.booking import Booking
from ...domain.enums import BookingStatus


class CreateBookingDto(BaseModel):
    """Request DTO for booking seats"""
    event_id: UUID
    seats: int = Field(1, ge=1)
    # Only honoured for administrators booking on someone's behalf
    user_id: Optional[UUID] = None


class BookingDto(BaseModel):
    """Response DTO for booking data"""
    id: UUID
    user_id: UUID
    event_id: UUID
    seats: int
    total_price: Decimal
    currency: str
    status: BookingStatus
    payment_id: Optional[str] = None
    booking_date: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, booking: Booking) -> "BookingDto":
        return cls(
            id=booking.id.value,
            user_id=booking.user_id.value,
            event_id=booking.event_id.value,
            seats=booking.seats,
            total_price=booking.total_price.amount,
            currency=booking.total_price.currency,
            status=booking.status,
            payment_id=booking.payment_id,
            booking_date=booking.booking_date,
            updated_at=booking.updated_at,
        )

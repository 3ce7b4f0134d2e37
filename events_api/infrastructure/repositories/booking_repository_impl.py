"""Booking repository implementation using SQLAlchemy ORM"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from ...core.clock import ensure_utc
from ...domain.entities.booking import Booking
from ...domain.enums import BookingStatus
from ...domain.repositories.booking_repository import IBookingRepository
from ...domain.value_objects.entity_ids import BookingId, EventId, UserId
from ...domain.value_objects.money import Money
from ..orm.booking_model import BookingModel
from ._errors import translate_integrity_errors


_SEAT_HOLDING = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


class BookingRepositoryImpl(IBookingRepository):

    def __init__(self, session: Session):
        self.session = session

    async def get_by_id(self, booking_id: BookingId) -> Optional[Booking]:
        """Get booking by ID"""
        model = (
            self.session.query(BookingModel)
            .populate_existing()
            .filter(BookingModel.id == booking_id.value)
            .first()
        )
        return self._map_to_entity(model) if model else None

    async def add(self, booking: Booking) -> Booking:
        """Add a new booking"""
        self.session.add(BookingModel(
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
        ))
        with translate_integrity_errors("Booking could not be stored"):
            self.session.flush()
        return booking

    async def mark_cancelled(self, booking: Booking) -> bool:
        """Only the request that moves the row out of a seat-holding status wins"""
        result = self.session.execute(
            update(BookingModel)
            .where(BookingModel.id == booking.id.value, BookingModel.status.in_(_SEAT_HOLDING))
            .values(status=BookingStatus.CANCELLED, updated_at=booking.updated_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def list(self, user_id: Optional[UserId], offset: int, limit: int) -> List[Booking]:
        """List bookings, newest first"""
        models = (
            self._scoped(user_id)
            .order_by(BookingModel.booking_date.desc(), BookingModel.id)
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [self._map_to_entity(model) for model in models]

    async def count(self, user_id: Optional[UserId]) -> int:
        return self._scoped(user_id).count()

    async def count_active_for_event(self, event_id: EventId) -> int:
        return (
            self.session.query(BookingModel)
            .filter(BookingModel.event_id == event_id.value, BookingModel.status.in_(_SEAT_HOLDING))
            .count()
        )

    def _scoped(self, user_id: Optional[UserId]):
        query = self.session.query(BookingModel)
        if user_id is not None:
            query = query.filter(BookingModel.user_id == user_id.value)
        return query

    def _map_to_entity(self, model: BookingModel) -> Booking:
        """Map ORM model to domain entity"""
        return Booking(
            id=BookingId(model.id),
            user_id=UserId(model.user_id),
            event_id=EventId(model.event_id),
            seats=model.seats,
            total_price=Money(Decimal(model.total_price), model.currency),
            status=model.status,
            payment_id=model.payment_id,
            booking_date=ensure_utc(model.booking_date),
            updated_at=ensure_utc(model.updated_at),
        )

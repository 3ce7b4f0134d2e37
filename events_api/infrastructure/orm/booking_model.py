"""Booking ORM Model"""

from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, DateTime, Enum as SQLEnum, ForeignKey, Index, Integer, Numeric, String, Uuid
from sqlalchemy.sql import func

from ...db.models import Base
from ...domain.enums import BookingStatus


class BookingModel(Base):
    __tablename__ = 'bookings'

    id = Column(Uuid, primary_key=True, default=uuid4)
    user_id = Column(Uuid, ForeignKey('users.id'), nullable=False, index=True)
    event_id = Column(Uuid, ForeignKey('events.id'), nullable=False, index=True)
    seats = Column(Integer, nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default='USD', nullable=False)
    status = Column(SQLEnum(BookingStatus, name='booking_status'), default=BookingStatus.PENDING, nullable=False)
    payment_id = Column(String(255), nullable=True)

    booking_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint('seats >= 1', name='seats_positive'),
        CheckConstraint('total_price >= 0', name='total_price_not_negative'),
        Index('idx_bookings_event_status', 'event_id', 'status'),
    )

"""Event ORM Model"""

from uuid import uuid4

from sqlalchemy import (
    CheckConstraint, Column, DateTime, Enum as SQLEnum, ForeignKey, Index, Integer, Numeric, String, Text, Uuid,
)
from sqlalchemy.sql import func

from ...db.models import Base
from ...domain.enums import EventCategory, EventStatus


class EventModel(Base):
    __tablename__ = 'events'

    id = Column(Uuid, primary_key=True, default=uuid4)
    slug = Column(String(200), unique=True, nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(SQLEnum(EventCategory, name='event_category'), nullable=False)
    status = Column(SQLEnum(EventStatus, name='event_status'), default=EventStatus.DRAFT, nullable=False, index=True)

    start_date = Column(DateTime(timezone=True), nullable=False, index=True)
    end_date = Column(DateTime(timezone=True), nullable=False)

    # Fixed-point; never stored as a float
    price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default='USD', nullable=False)
    capacity = Column(Integer, nullable=False)
    booked_count = Column(Integer, default=0, nullable=False)

    organizer_id = Column(Uuid, ForeignKey('users.id'), nullable=False, index=True)
    venue_id = Column(Uuid, ForeignKey('venues.id'), nullable=False, index=True)

    image_url = Column(String(500), nullable=True)
    video_url = Column(String(500), nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint('capacity > 0', name='capacity_positive'),
        CheckConstraint('booked_count >= 0 AND booked_count <= capacity', name='booked_count_within_capacity'),
        CheckConstraint('price >= 0', name='price_not_negative'),
        CheckConstraint('start_date < end_date', name='dates_ordered'),
        Index('idx_events_status_start_date', 'status', 'start_date'),
    )

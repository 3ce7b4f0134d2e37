"""Event DTOs for API requests and responses"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ...domain.entities.event import Event
from ...domain.enums import EventCategory, EventStatus


SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class CreateEventDto(BaseModel):
    """Request DTO for creating an event"""
    title: str = Field(..., min_length=3, max_length=200)
    slug: str = Field(..., min_length=1, max_length=200, pattern=SLUG_PATTERN)
    description: str = Field(..., min_length=10)
    category: EventCategory
    start_date: datetime
    end_date: datetime
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    currency: str = Field("USD", min_length=3, max_length=3)
    capacity: int = Field(..., ge=1)
    venue_id: UUID
    image_url: Optional[str] = Field(None, max_length=500)
    video_url: Optional[str] = Field(None, max_length=500)


class UpdateEventDto(BaseModel):
    """Request DTO for a partial event edit; status is changed through its own endpoints"""
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=200, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(None, min_length=10)
    category: Optional[EventCategory] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    capacity: Optional[int] = Field(None, ge=1)
    venue_id: Optional[UUID] = None
    image_url: Optional[str] = Field(None, max_length=500)
    video_url: Optional[str] = Field(None, max_length=500)


class EventDto(BaseModel):
    """Response DTO for event data"""
    id: UUID
    slug: str
    title: str
    description: str
    category: EventCategory
    status: EventStatus
    start_date: datetime
    end_date: datetime
    price: Decimal
    currency: str
    capacity: int
    booked_count: int
    remaining_seats: int
    organizer_id: UUID
    venue_id: UUID
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, event: Event) -> "EventDto":
        return cls(
            id=event.id.value,
            slug=event.slug,
            title=event.title,
            description=event.description,
            category=event.category,
            status=event.status,
            start_date=event.start_date,
            end_date=event.end_date,
            price=event.price.amount,
            currency=event.price.currency,
            capacity=event.capacity,
            booked_count=event.booked_count,
            remaining_seats=event.remaining_seats,
            organizer_id=event.organizer_id.value,
            venue_id=event.venue_id.value,
            image_url=event.image_url,
            video_url=event.video_url,
            published_at=event.published_at,
            created_at=event.created_at,
            updated_at=event.updated_at,
        )

"""Event entity with business logic"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ...core.clock import ensure_utc, utcnow
from ..enums import EventCategory, EventStatus
from ..errors import ValidationError
from ..events.event_events import EventCancelled, EventCompleted, EventPublished
from ..policies.event_lifecycle import ensure_transition
from ..value_objects.entity_ids import EventId, UserId, VenueId
from ..value_objects.money import Money


MIN_TITLE_LENGTH = 3
MIN_DESCRIPTION_LENGTH = 10


@dataclass
class Event:
    id: EventId
    slug: str
    title: str
    description: str
    category: EventCategory
    start_date: datetime
    end_date: datetime
    price: Money
    capacity: int
    organizer_id: UserId
    venue_id: VenueId
    status: EventStatus = EventStatus.DRAFT
    booked_count: int = 0
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    published_at: Optional[datetime] = None

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    # Domain events
    _events: List = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        self.start_date = ensure_utc(self.start_date)
        self.end_date = ensure_utc(self.end_date)
        self.published_at = ensure_utc(self.published_at)
        self.validate()

    def validate(self) -> None:
        """Invariants that hold for every persisted event"""
        if not self.title or len(self.title.strip()) < MIN_TITLE_LENGTH:
            raise ValidationError(f"Title must be at least {MIN_TITLE_LENGTH} characters")
        if not self.description or len(self.description.strip()) < MIN_DESCRIPTION_LENGTH:
            raise ValidationError(f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters")
        if self.start_date >= self.end_date:
            raise ValidationError("Start date must be before end date")
        if self.capacity < 1:
            raise ValidationError("Capacity must be greater than zero")
        if not 0 <= self.booked_count <= self.capacity:
            raise ValidationError(
                f"Capacity cannot be lower than the {self.booked_count} seat(s) already booked"
            )

    @classmethod
    def create(
        cls,
        slug: str,
        title: str,
        description: str,
        category: EventCategory,
        start_date: datetime,
        end_date: datetime,
        price: Money,
        capacity: int,
        organizer_id: UserId,
        venue_id: VenueId,
        image_url: Optional[str] = None,
        video_url: Optional[str] = None,
    ) -> "Event":
        """Factory method: new events always start as drafts with no bookings"""
        now = utcnow()
        return cls(
            id=EventId.generate(),
            slug=slug,
            title=title,
            description=description,
            category=category,
            start_date=start_date,
            end_date=end_date,
            price=price,
            capacity=capacity,
            organizer_id=organizer_id,
            venue_id=venue_id,
            status=EventStatus.DRAFT,
            booked_count=0,
            image_url=image_url,
            video_url=video_url,
            created_at=now,
            updated_at=now,
        )

    def update_details(self, **changes) -> None:
        """Apply a partial edit and re-check invariants.

        Status and booked_count are not editable here; they only change
        through the lifecycle methods and the booking ledger.
        """
        forbidden = {"status", "booked_count", "id", "organizer_id", "published_at"} & changes.keys()
        if forbidden:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(forbidden))}")

        previous = {name: getattr(self, name) for name in changes}
        for name, value in changes.items():
            if name in ("start_date", "end_date"):
                value = ensure_utc(value)
            setattr(self, name, value)
        try:
            self.validate()
        except ValidationError:
            for name, value in previous.items():
                setattr(self, name, value)
            raise
        self.updated_at = utcnow()

    def publish(self) -> None:
        """Business logic: publish a draft"""
        ensure_transition(self.status, EventStatus.PUBLISHED)
        self.status = EventStatus.PUBLISHED
        self.published_at = utcnow()
        self.updated_at = self.published_at
        self._events.append(EventPublished(
            event_id=self.id,
            organizer_id=self.organizer_id,
            published_at=self.published_at,
        ))

    def cancel(self) -> None:
        """Business logic: cancel (not allowed once completed, repeating it is a no-op)"""
        if self.status == EventStatus.CANCELLED:
            return
        ensure_transition(self.status, EventStatus.CANCELLED)
        self.status = EventStatus.CANCELLED
        self.updated_at = utcnow()
        self._events.append(EventCancelled(
            event_id=self.id,
            organizer_id=self.organizer_id,
            cancelled_at=self.updated_at,
        ))

    def complete(self) -> None:
        """Business logic: mark a published event as completed"""
        ensure_transition(self.status, EventStatus.COMPLETED)
        self.status = EventStatus.COMPLETED
        self.updated_at = utcnow()
        self._events.append(EventCompleted(
            event_id=self.id,
            organizer_id=self.organizer_id,
            completed_at=self.updated_at,
        ))

    @property
    def remaining_seats(self) -> int:
        return self.capacity - self.booked_count

    @property
    def is_published(self) -> bool:
        return self.status == EventStatus.PUBLISHED

    def is_open_for_booking(self, now: Optional[datetime] = None) -> bool:
        """Only published events that have not started yet take bookings"""
        now = now or utcnow()
        return self.is_published and self.start_date > now

    def get_events(self) -> List:
        """Get and clear domain events"""
        events = self._events.copy()
        self._events.clear()
        return events

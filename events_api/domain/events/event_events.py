"""Event lifecycle domain events"""

from dataclasses import dataclass
from datetime import datetime

from ..value_objects.entity_ids import EventId, UserId


@dataclass(frozen=True)
class EventPublished:
    event_id: EventId
    organizer_id: UserId
    published_at: datetime


@dataclass(frozen=True)
class EventCancelled:
    event_id: EventId
    organizer_id: UserId
    cancelled_at: datetime


@dataclass(frozen=True)
class EventCompleted:
    event_id: EventId
    organizer_id: UserId
    completed_at: datetime

"""
Domain Enums - Business domain enumerations
"""

from enum import Enum


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    DELETED = "DELETED"


class UserRole(str, Enum):
    USER = "USER"
    ORGANIZER = "ORGANIZER"
    ADMIN = "ADMIN"


class EventStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class EventCategory(str, Enum):
    MUSIC = "MUSIC"
    SPORTS = "SPORTS"
    CONFERENCE = "CONFERENCE"
    WORKSHOP = "WORKSHOP"
    FESTIVAL = "FESTIVAL"
    THEATER = "THEATER"
    EXHIBITION = "EXHIBITION"
    OTHER = "OTHER"


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"

    @property
    def is_terminal(self) -> bool:
        return self in (BookingStatus.CANCELLED, BookingStatus.REFUNDED)

    @property
    def holds_seats(self) -> bool:
        return self in (BookingStatus.PENDING, BookingStatus.CONFIRMED)

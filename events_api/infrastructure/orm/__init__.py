"""Infrastructure ORM Models"""

from .user_model import UserModel
from .venue_model import VenueModel
from .event_model import EventModel
from .booking_model import BookingModel
from .refresh_token_model import RefreshTokenModel
from .audit_log_model import AuditLogModel

__all__ = [
    'UserModel',
    'VenueModel',
    'EventModel',
    'BookingModel',
    'RefreshTokenModel',
    'AuditLogModel',
]

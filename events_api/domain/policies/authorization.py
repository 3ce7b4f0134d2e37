"""Authorization policy.

``can_perform`` is a pure function of the acting subject, the action and
(optionally) the resource being acted on. It never touches storage; callers
load the resource first and pass it in. Ownership is read from the resource's
``organizer_id`` (events) or ``user_id`` (bookings) attribute.

Capabilities by role:

    action                      USER         ORGANIZER    ADMIN
    book event                  self only    self only    anyone
    view / cancel booking       owner        owner        any
    create event                -            yes          yes
    edit / delete / status      -            owner        any
    view unpublished events     -            own          all
    manage content, users       -            -            yes
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..enums import UserRole
from ..errors import ForbiddenError
from ..value_objects.entity_ids import UserId


class Action(str, Enum):
    BOOK_EVENT = "book_event"
    VIEW_BOOKING = "view_booking"
    CANCEL_BOOKING = "cancel_booking"
    CREATE_EVENT = "create_event"
    EDIT_EVENT = "edit_event"
    DELETE_EVENT = "delete_event"
    CHANGE_EVENT_STATUS = "change_event_status"
    VIEW_UNPUBLISHED_EVENTS = "view_unpublished_events"
    MANAGE_CONTENT = "manage_content"
    MANAGE_USERS = "manage_users"


@dataclass(frozen=True)
class Subject:
    """The authenticated caller, as established from a verified access token"""

    id: UserId
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


@dataclass(frozen=True)
class OwnedBy:
    """Stand-in resource when only its future owner is known (e.g. a booking being made)"""

    user_id: UserId

_OWNER_ACTIONS = {Action.BOOK_EVENT, Action.VIEW_BOOKING, Action.CANCEL_BOOKING}
_ORGANIZER_ACTIONS = {
    Action.CREATE_EVENT,
    Action.EDIT_EVENT,
    Action.DELETE_EVENT,
    Action.CHANGE_EVENT_STATUS,
    Action.VIEW_UNPUBLISHED_EVENTS,
}
_ADMIN_ONLY_ACTIONS = {Action.MANAGE_CONTENT, Action.MANAGE_USERS}

# Actions where an organizer needs no particular resource
_UNSCOPED_ORGANIZER_ACTIONS = {Action.CREATE_EVENT, Action.VIEW_UNPUBLISHED_EVENTS}


def _owner_of(resource: Any) -> Optional[UserId]:
    for attribute in ("organizer_id", "user_id"):
        owner = getattr(resource, attribute, None)
        if owner is not None:
            return owner
    return None


def can_perform(subject: Subject, action: Action, resource: Any = None) -> Decision:
    """Decide whether ``subject`` may perform ``action`` on ``resource``."""
    if subject.role == UserRole.ADMIN:
        return ALLOW

    if action in _ADMIN_ONLY_ACTIONS:
        return Decision(False, "Administrator role required")

    if action in _ORGANIZER_ACTIONS:
        if subject.role != UserRole.ORGANIZER:
            return Decision(False, "Organizer role required")
        if action in _UNSCOPED_ORGANIZER_ACTIONS and resource is None:
            return ALLOW
        if resource is None:
            return Decision(False, "Resource required for ownership check")
        if _owner_of(resource) != subject.id:
            return Decision(False, "Only the event organizer can do this")
        return ALLOW

    if action in _OWNER_ACTIONS:
        if resource is None:
            # Acting on their own behalf (e.g. a new booking for themselves)
            return ALLOW
        if _owner_of(resource) != subject.id:
            return Decision(False, "You can only act on your own bookings")
        return ALLOW

    return Decision(False, f"Unknown action {action}")


def authorize(subject: Subject, action: Action, resource: Any = None) -> None:
    """Raise ForbiddenError when ``can_perform`` denies the action."""
    decision = can_perform(subject, action, resource)
    if not decision.allowed:
        raise ForbiddenError(decision.reason or "You are not allowed to perform this action")

"""Event status state machine.

DRAFT -> PUBLISHED -> {CANCELLED, COMPLETED}. A draft may also be cancelled
outright. There is no way back to DRAFT, and CANCELLED and COMPLETED are
terminal. ``Event.cancel`` treats cancelling a cancelled event as a no-op
rather than a transition.
"""

from ..enums import EventStatus
from ..errors import InvalidStateTransitionError


ALLOWED_TRANSITIONS: dict[EventStatus, frozenset[EventStatus]] = {
    EventStatus.DRAFT: frozenset({EventStatus.PUBLISHED, EventStatus.CANCELLED}),
    EventStatus.PUBLISHED: frozenset({EventStatus.CANCELLED, EventStatus.COMPLETED}),
    EventStatus.CANCELLED: frozenset(),
    EventStatus.COMPLETED: frozenset(),
}


def can_transition(current: EventStatus, target: EventStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(current: EventStatus, target: EventStatus) -> None:
    """Raise InvalidStateTransitionError unless ``current -> target`` is allowed."""
    if not can_transition(current, target):
        raise InvalidStateTransitionError(current, target)

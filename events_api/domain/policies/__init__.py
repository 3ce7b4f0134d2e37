"""Authorization and lifecycle rules"""

from .authorization import Action, Decision, OwnedBy, Subject, authorize, can_perform
from .event_lifecycle import can_transition, ensure_transition

__all__ = [
    "Action",
    "Decision",
    "OwnedBy",
    "Subject",
    "authorize",
    "can_perform",
    "can_transition",
    "ensure_transition",
]

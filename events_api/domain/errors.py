"""Domain error codes and exceptions.

Every error carries a stable ``ErrorCode`` and a message that is safe to show
to API clients. The HTTP layer maps codes to status codes; nothing here knows
about HTTP.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"
    TOKEN_REUSED = "TOKEN_REUSED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INSUFFICIENT_CAPACITY = "INSUFFICIENT_CAPACITY"
    BOOKING_NOT_ALLOWED = "BOOKING_NOT_ALLOWED"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    ALREADY_CANCELLED = "ALREADY_CANCELLED"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str, errors: Optional[list[dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Malformed or out-of-range input."""

    code = ErrorCode.VALIDATION_ERROR


class AuthenticationError(DomainError):
    """Bad credentials or inactive account."""

    code = ErrorCode.AUTHENTICATION_ERROR


class TokenExpiredError(DomainError):
    code = ErrorCode.TOKEN_EXPIRED

    def __init__(self, message: str = "Token has expired") -> None:
        super().__init__(message)


class TokenInvalidError(DomainError):
    code = ErrorCode.TOKEN_INVALID

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class TokenReusedError(DomainError):
    """A refresh token that was already rotated or revoked was presented again."""

    code = ErrorCode.TOKEN_REUSED

    def __init__(self, user_id: Any = None) -> None:
        # Same wording as an invalid token; reuse is not advertised to clients
        super().__init__("Invalid token")
        self.user_id = user_id


class ForbiddenError(DomainError):
    code = ErrorCode.FORBIDDEN

    def __init__(self, message: str = "You are not allowed to perform this action") -> None:
        super().__init__(message)


class NotFoundError(DomainError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str, identifier: Any = None) -> None:
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.identifier = identifier


class ConflictError(DomainError):
    """Uniqueness or referential conflict."""

    code = ErrorCode.CONFLICT


class InsufficientCapacityError(DomainError):
    code = ErrorCode.INSUFFICIENT_CAPACITY

    def __init__(self, requested: int, remaining: Optional[int] = None) -> None:
        if remaining is None:
            message = f"Not enough seats left for {requested} seat(s)"
        else:
            message = f"Only {remaining} seat(s) left, {requested} requested"
        super().__init__(message)
        self.requested = requested
        self.remaining = remaining


class BookingNotAllowedError(DomainError):
    """The event is not open for bookings."""

    code = ErrorCode.BOOKING_NOT_ALLOWED


class InvalidStateTransitionError(DomainError):
    code = ErrorCode.INVALID_STATE_TRANSITION

    def __init__(self, current: Enum, target: Enum) -> None:
        super().__init__(f"Cannot change status from {current.value} to {target.value}")
        self.current = current
        self.target = target


class AlreadyCancelledError(DomainError):
    """Cancelling a booking that is already cancelled or refunded.

    Not a failure for the caller: ``booking`` holds the unchanged resource.
    """

    code = ErrorCode.ALREADY_CANCELLED

    def __init__(self, booking: Any = None) -> None:
        super().__init__("Booking is already cancelled")
        self.booking = booking

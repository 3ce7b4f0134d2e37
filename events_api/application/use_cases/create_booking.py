"""Create booking use case"""

import logging
from typing import Optional

from ...core.clock import utcnow
from ...domain.entities.booking import Booking
from ...domain.enums import BookingStatus
from ...domain.errors import BookingNotAllowedError, InsufficientCapacityError, NotFoundError, ValidationError
from ...domain.policies import Action, OwnedBy, Subject, authorize
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import EventId, UserId
from ..dtos.booking_dtos import BookingDto
from ._common import log_domain_events


logger = logging.getLogger(__name__)


class CreateBookingUseCase:
    """Book seats on a published, upcoming event.

    The seats are reserved with a single conditional update of the event row
    inside the same transaction as the booking insert, so concurrent requests
    for the last seats cannot oversell and a failed insert leaves no
    reservation behind.
    """

    def __init__(self, unit_of_work: IUnitOfWork, initial_status: BookingStatus = BookingStatus.CONFIRMED):
        self.unit_of_work = unit_of_work
        self.initial_status = initial_status

    async def execute(
        self,
        subject: Subject,
        event_id: EventId,
        seats: int,
        user_id: Optional[UserId] = None,
    ) -> BookingDto:
        if seats < 1:
            raise ValidationError(
                "At least one seat must be booked",
                errors=[{"field": "seats", "message": "must be at least 1"}],
            )

        owner_id = user_id or subject.id
        authorize(subject, Action.BOOK_EVENT, OwnedBy(owner_id))

        async with self.unit_of_work:
            event = await self.unit_of_work.events.get_by_id(event_id)
            if event is None:
                raise NotFoundError("Event", event_id)

            now = utcnow()
            if not event.is_open_for_booking(now):
                raise BookingNotAllowedError(self._closed_reason(event.is_published))

            if owner_id != subject.id:
                owner = await self.unit_of_work.users.get_by_id(owner_id)
                if owner is None or not owner.is_active:
                    raise NotFoundError("User", owner_id)

            # No event can ever hold this many; refuse before pricing or touching the row
            if seats > event.capacity:
                raise InsufficientCapacityError(seats, event.remaining_seats)

            booking = Booking.create(owner_id, event, seats, self.initial_status)

            if not await self.unit_of_work.events.reserve_seats(event.id, seats, now):
                # Tell a sold-out event apart from one that closed in the meantime
                current = await self.unit_of_work.events.get_by_id(event.id)
                if current is None:
                    raise NotFoundError("Event", event_id)
                if not current.is_open_for_booking(now):
                    raise BookingNotAllowedError(self._closed_reason(current.is_published))
                raise InsufficientCapacityError(seats, current.remaining_seats)

            await self.unit_of_work.bookings.add(booking)
            await self.unit_of_work.commit()

        logger.info(
            "Booking created",
            extra={"booking_id": str(booking.id), "event_id": str(event.id), "seats": seats},
        )
        log_domain_events(booking.get_events())
        return BookingDto.from_entity(booking)

    @staticmethod
    def _closed_reason(is_published: bool) -> str:
        if not is_published:
            return "Event is not open for booking"
        return "Event has already started"

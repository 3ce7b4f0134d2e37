"""Cancel booking use case"""

from ...core.logging import get_security_logger
from ...domain.errors import AlreadyCancelledError, NotFoundError
from ...domain.policies import Action, Subject, authorize
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import BookingId
from ..dtos.booking_dtos import BookingDto
from ._common import log_domain_events


security_logger = get_security_logger()


class CancelBookingUseCase:
    """Cancel a booking and give its seats back to the event.

    Cancelling twice is harmless: the second call raises AlreadyCancelledError
    carrying the unchanged booking, and releases nothing.
    """

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, subject: Subject, booking_id: BookingId) -> BookingDto:
        async with self.unit_of_work:
            booking = await self.unit_of_work.bookings.get_by_id(booking_id)
            if booking is None:
                raise NotFoundError("Booking", booking_id)

            authorize(subject, Action.CANCEL_BOOKING, booking)

            booking.cancel()
            if not await self.unit_of_work.bookings.mark_cancelled(booking):
                # A concurrent request cancelled it first and released the seats
                current = await self.unit_of_work.bookings.get_by_id(booking_id)
                raise AlreadyCancelledError(current)

            if not await self.unit_of_work.events.release_seats(booking.event_id, booking.seats):
                security_logger.error(
                    "Data integrity alarm: booked_count lower than seats being released",
                    extra={
                        "booking_id": str(booking.id),
                        "event_id": str(booking.event_id),
                        "seats": booking.seats,
                    },
                )
                await self.unit_of_work.audit_logs.record(
                    "integrity.booked_count_underflow",
                    user_id=subject.id,
                    resource_type="event",
                    resource_id=str(booking.event_id),
                    details={"booking_id": str(booking.id), "seats": booking.seats},
                )
            await self.unit_of_work.commit()

        log_domain_events(booking.get_events())
        return BookingDto.from_entity(booking)

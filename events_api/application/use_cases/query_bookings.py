"""Booking read use cases"""

from ...domain.errors import ForbiddenError, NotFoundError
from ...domain.policies import Action, Subject, authorize
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import BookingId
from ..dtos.booking_dtos import BookingDto
from ..dtos.common import Page, PaginationMeta, page_offset


class GetBookingUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, subject: Subject, booking_id: BookingId) -> BookingDto:
        async with self.unit_of_work:
            booking = await self.unit_of_work.bookings.get_by_id(booking_id)
        if booking is None:
            raise NotFoundError("Booking", booking_id)
        authorize(subject, Action.VIEW_BOOKING, booking)
        return BookingDto.from_entity(booking)


class ListBookingsUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(
        self,
        subject: Subject,
        page: int = 1,
        limit: int = 20,
        all_users: bool = False,
    ) -> Page[BookingDto]:
        """The caller's own bookings, newest first; administrators may ask for everyone's"""
        if all_users and not subject.is_admin:
            raise ForbiddenError("Only administrators can list all bookings")
        user_id = None if all_users else subject.id

        async with self.unit_of_work:
            bookings = await self.unit_of_work.bookings.list(user_id, page_offset(page, limit), limit)
            total = await self.unit_of_work.bookings.count(user_id)

        return Page[BookingDto](
            data=[BookingDto.from_entity(booking) for booking in bookings],
            meta=PaginationMeta(page=page, limit=limit, total=total),
        )

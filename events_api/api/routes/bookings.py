"""Booking routes"""

from fastapi import APIRouter, Depends, Query, status

from ...application.dtos.booking_dtos import BookingDto, CreateBookingDto
from ...application.dtos.common import Page
from ...application.use_cases.cancel_booking import CancelBookingUseCase
from ...application.use_cases.create_booking import CreateBookingUseCase
from ...application.use_cases.query_bookings import GetBookingUseCase, ListBookingsUseCase
from ...core.config import Settings
from ...domain.enums import BookingStatus
from ...domain.errors import AlreadyCancelledError
from ...domain.policies import Subject
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import BookingId, EventId, UserId
from ..dependencies import get_current_subject, get_settings, get_unit_of_work, parse_path_id

router = APIRouter()


@router.post("", response_model=BookingDto, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: CreateBookingDto,
    subject: Subject = Depends(get_current_subject),
    settings: Settings = Depends(get_settings),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    """Book seats for yourself (administrators may pass ``user_id``)"""
    use_case = CreateBookingUseCase(unit_of_work, BookingStatus(settings.BOOKING_INITIAL_STATUS))
    return await use_case.execute(
        subject,
        EventId(booking_data.event_id),
        booking_data.seats,
        user_id=UserId(booking_data.user_id) if booking_data.user_id else None,
    )


@router.get("", response_model=Page[BookingDto])
async def list_bookings(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    all_users: bool = Query(False, alias="all"),
    subject: Subject = Depends(get_current_subject),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    return await ListBookingsUseCase(unit_of_work).execute(subject, page=page, limit=limit, all_users=all_users)


@router.get("/{booking_id}", response_model=BookingDto)
async def get_booking(
    booking_id: str,
    subject: Subject = Depends(get_current_subject),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    return await GetBookingUseCase(unit_of_work).execute(subject, parse_path_id(BookingId, booking_id))


@router.patch("/{booking_id}/cancel", response_model=BookingDto)
async def cancel_booking(
    booking_id: str,
    subject: Subject = Depends(get_current_subject),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    """Cancel a booking; cancelling an already cancelled booking returns it unchanged"""
    try:
        return await CancelBookingUseCase(unit_of_work).execute(subject, parse_path_id(BookingId, booking_id))
    except AlreadyCancelledError as e:
        return BookingDto.from_entity(e.booking)

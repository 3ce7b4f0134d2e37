"""Event management routes for organizers and administrators"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ...application.dtos.common import Page
from ...application.dtos.event_dtos import CreateEventDto, EventDto, UpdateEventDto
from ...application.use_cases.manage_events import (
    ChangeEventStatusUseCase, CreateEventUseCase, DeleteEventUseCase, UpdateEventUseCase,
)
from ...application.use_cases.query_events import ListEventsUseCase
from ...domain.enums import EventCategory, EventStatus, UserRole
from ...domain.policies import Subject
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import EventId
from ..dependencies import get_unit_of_work, parse_path_id, require_roles

router = APIRouter()

organizer_or_admin = require_roles(UserRole.ORGANIZER, UserRole.ADMIN)


@router.get("", response_model=Page[EventDto])
async def list_managed_events(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    category: Optional[EventCategory] = None,
    subject: Subject = Depends(organizer_or_admin),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    """Every event for administrators, own events for organizers"""
    return await ListEventsUseCase(unit_of_work).execute(
        subject,
        page=page,
        limit=limit,
        status=status_filter,
        category=category,
        include_unpublished=True,
    )


@router.post("", response_model=EventDto, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: CreateEventDto,
    subject: Subject = Depends(organizer_or_admin),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    return await CreateEventUseCase(unit_of_work).execute(subject, event_data)


@router.put("/{event_id}", response_model=EventDto)
async def update_event(
    event_id: str,
    event_data: UpdateEventDto,
    subject: Subject = Depends(organizer_or_admin),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    return await UpdateEventUseCase(unit_of_work).execute(subject, parse_path_id(EventId, event_id), event_data)


async def _change_status(event_id: str, target: EventStatus, subject: Subject, unit_of_work: IUnitOfWork) -> EventDto:
    return await ChangeEventStatusUseCase(unit_of_work).execute(subject, parse_path_id(EventId, event_id), target)


@router.post("/{event_id}/publish", response_model=EventDto)
async def publish_event(
    event_id: str,
    subject: Subject = Depends(organizer_or_admin),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    return await _change_status(event_id, EventStatus.PUBLISHED, subject, unit_of_work)


@router.post("/{event_id}/cancel", response_model=EventDto)
async def cancel_event(
    event_id: str,
    subject: Subject = Depends(organizer_or_admin),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    return await _change_status(event_id, EventStatus.CANCELLED, subject, unit_of_work)


@router.post("/{event_id}/complete", response_model=EventDto)
async def complete_event(
    event_id: str,
    subject: Subject = Depends(organizer_or_admin),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    return await _change_status(event_id, EventStatus.COMPLETED, subject, unit_of_work)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: str,
    subject: Subject = Depends(organizer_or_admin),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    await DeleteEventUseCase(unit_of_work).execute(subject, parse_path_id(EventId, event_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)

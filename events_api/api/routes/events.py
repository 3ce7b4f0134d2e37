"""Public event catalogue routes"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...application.dtos.common import Page
from ...application.dtos.event_dtos import EventDto
from ...application.use_cases.query_events import GetEventUseCase, ListEventsUseCase
from ...domain.enums import EventCategory
from ...domain.policies import Subject
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import EventId
from ..dependencies import get_optional_subject, get_unit_of_work, parse_path_id

router = APIRouter()


@router.get("", response_model=Page[EventDto])
async def list_events(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category: Optional[EventCategory] = None,
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    """Published events, soonest first"""
    return await ListEventsUseCase(unit_of_work).execute(page=page, limit=limit, category=category)


@router.get("/slug/{slug}", response_model=EventDto)
async def get_event_by_slug(
    slug: str,
    subject: Optional[Subject] = Depends(get_optional_subject),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    return await GetEventUseCase(unit_of_work).execute(subject, slug=slug)


@router.get("/{event_id}", response_model=EventDto)
async def get_event(
    event_id: str,
    subject: Optional[Subject] = Depends(get_optional_subject),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    return await GetEventUseCase(unit_of_work).execute(subject, event_id=parse_path_id(EventId, event_id))

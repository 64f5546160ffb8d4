"""
Defense Schedules Router - Thesis Defense Platform
thesis_app/routers/defense_schedules.py

Defense sessions and their panelists.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from thesis_app.config import settings
from thesis_app.core.dependencies import get_schedule_service
from thesis_app.core.errors import get_actor_id, raise_error
from thesis_app.models.common import DeleteResponse, ErrorResponse
from thesis_app.models.defense_schedule import (
    DefenseScheduleCreate,
    DefenseScheduleEnvelope,
    DefenseScheduleListResponse,
    DefenseScheduleUpdate,
    PanelistAdd,
    PanelistListResponse,
)
from thesis_app.models.enumerations import ScheduleStatus
from thesis_app.services.schedule_service import ScheduleService

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["Defense Schedules"])


@router.get("/defense-schedules", response_model=DefenseScheduleListResponse, summary="List defense schedules")
async def list_schedules(
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    group_id: Optional[UUID] = Query(None),
    schedule_status: Optional[ScheduleStatus] = Query(None, alias="status"),
    date_from: Optional[date] = Query(None, alias="from", description="Inclusive start day (UTC)"),
    date_to: Optional[date] = Query(None, alias="to", description="Inclusive end day (UTC)"),
    service: ScheduleService = Depends(get_schedule_service),
) -> DefenseScheduleListResponse:
    if date_from and date_to and date_from > date_to:
        raise_error(status.HTTP_400_BAD_REQUEST, "INVALID_DATE_RANGE", "'from' must not be after 'to'")
    items, total = service.list(
        limit,
        offset,
        group_id=group_id,
        status=schedule_status.value if schedule_status else None,
        date_from=date_from,
        date_to=date_to,
    )
    return DefenseScheduleListResponse(items=items, total=total, limit=limit, offset=offset)


@router.post(
    "/defense-schedules",
    response_model=DefenseScheduleEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse, "description": "Group or rubric template not found"}},
    summary="Schedule a defense",
    description="When rubric_template_id is omitted the newest active template is attached.",
)
async def create_schedule(
    payload: DefenseScheduleCreate,
    service: ScheduleService = Depends(get_schedule_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> DefenseScheduleEnvelope:
    schedule = service.create(payload, actor_id)
    return DefenseScheduleEnvelope(schedule=schedule, message="Defense scheduled")


@router.get("/defense-schedules/{schedule_id}", response_model=DefenseScheduleEnvelope, summary="Get defense schedule")
async def get_schedule(
    schedule_id: UUID,
    service: ScheduleService = Depends(get_schedule_service),
) -> DefenseScheduleEnvelope:
    return DefenseScheduleEnvelope(schedule=service.get(schedule_id))


@router.patch("/defense-schedules/{schedule_id}", response_model=DefenseScheduleEnvelope, summary="Update defense schedule")
async def update_schedule(
    schedule_id: UUID,
    payload: DefenseScheduleUpdate,
    service: ScheduleService = Depends(get_schedule_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> DefenseScheduleEnvelope:
    schedule = service.update(schedule_id, payload, actor_id)
    return DefenseScheduleEnvelope(schedule=schedule, message="Defense schedule updated")


@router.delete(
    "/defense-schedules/{schedule_id}",
    response_model=DeleteResponse,
    summary="Delete defense schedule",
    description="Also removes its panelists, evaluations, scores and student feedback.",
)
async def delete_schedule(
    schedule_id: UUID,
    service: ScheduleService = Depends(get_schedule_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> DeleteResponse:
    service.delete(schedule_id, actor_id)
    return DeleteResponse(id=str(schedule_id), message="Defense schedule deleted")


#  Panelists


@router.get(
    "/defense-schedules/{schedule_id}/panelists",
    response_model=PanelistListResponse,
    summary="List panelists",
)
async def list_panelists(
    schedule_id: UUID,
    service: ScheduleService = Depends(get_schedule_service),
) -> PanelistListResponse:
    return PanelistListResponse(schedule_id=schedule_id, panelists=service.list_panelists(schedule_id))


@router.post(
    "/defense-schedules/{schedule_id}/panelists",
    response_model=PanelistListResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "User is not staff or panelist"},
        409: {"model": ErrorResponse, "description": "Already on the panel"},
    },
    summary="Add a panelist",
)
async def add_panelist(
    schedule_id: UUID,
    payload: PanelistAdd,
    service: ScheduleService = Depends(get_schedule_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> PanelistListResponse:
    if not service.add_panelist(schedule_id, payload.staff_id, actor_id):
        raise_error(status.HTTP_409_CONFLICT, "DUPLICATE_PANELIST", "User is already a panelist for this defense")
    return PanelistListResponse(
        schedule_id=schedule_id,
        panelists=service.list_panelists(schedule_id),
        message="Panelist added",
    )


@router.delete(
    "/defense-schedules/{schedule_id}/panelists/{staff_id}",
    response_model=DeleteResponse,
    summary="Remove a panelist",
)
async def remove_panelist(
    schedule_id: UUID,
    staff_id: UUID,
    service: ScheduleService = Depends(get_schedule_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> DeleteResponse:
    service.remove_panelist(schedule_id, staff_id, actor_id)
    return DeleteResponse(id=str(staff_id), message="Panelist removed")

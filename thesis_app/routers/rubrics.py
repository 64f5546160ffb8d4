"""
Rubric Router - Thesis Defense Platform
thesis_app/routers/rubrics.py

Rubric templates, criteria and adjectival scale levels. Template detail is
served from Redis when available (see services/rubric_service.py).
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from thesis_app.config import settings
from thesis_app.core.dependencies import get_rubric_service
from thesis_app.core.errors import get_actor_id
from thesis_app.models.common import DeleteResponse, ErrorResponse
from thesis_app.models.rubric import (
    RubricCriterionCreate,
    RubricCriterionEnvelope,
    RubricCriterionUpdate,
    RubricScaleLevelsEnvelope,
    RubricScaleLevelsUpdate,
    RubricTemplateCreate,
    RubricTemplateEnvelope,
    RubricTemplateListResponse,
    RubricTemplateUpdate,
)
from thesis_app.services.rubric_service import RubricService

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["Rubrics"])

NOT_FOUND_RESPONSE = {
    404: {
        "model": ErrorResponse,
        "description": "Rubric template not found",
        "content": {
            "application/json": {
                "example": {
                    "ok": False,
                    "error_code": "RUBRIC_TEMPLATE_NOT_FOUND",
                    "message": "rubric template with ID 550e8400-e29b-41d4-a716-446655440000 not found",
                    "details": None,
                    "timestamp": "2026-01-28T01:19:36.806Z",
                }
            }
        },
    },
}


#  Templates


@router.get("/rubric-templates", response_model=RubricTemplateListResponse, summary="List rubric templates")
async def list_templates(
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    active: Optional[bool] = Query(None),
    q: Optional[str] = Query(None, max_length=255),
    service: RubricService = Depends(get_rubric_service),
) -> RubricTemplateListResponse:
    items, total = service.list_templates(limit, offset, active=active, q=q)
    return RubricTemplateListResponse(items=items, total=total, limit=limit, offset=offset)


@router.post(
    "/rubric-templates",
    response_model=RubricTemplateEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create rubric template",
)
async def create_template(
    payload: RubricTemplateCreate,
    service: RubricService = Depends(get_rubric_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> RubricTemplateEnvelope:
    template = service.create_template(payload, actor_id)
    return RubricTemplateEnvelope(template=template, message="Rubric template created")


@router.get(
    "/rubric-templates/{template_id}",
    response_model=RubricTemplateEnvelope,
    responses=NOT_FOUND_RESPONSE,
    summary="Get rubric template",
    description="Template with its criteria and weight/min/max totals. Cached for 1 hour.",
)
async def get_template(
    template_id: UUID,
    service: RubricService = Depends(get_rubric_service),
) -> RubricTemplateEnvelope:
    return RubricTemplateEnvelope(template=service.get_template_detail(template_id))


@router.patch(
    "/rubric-templates/{template_id}",
    response_model=RubricTemplateEnvelope,
    responses=NOT_FOUND_RESPONSE,
    summary="Update rubric template",
)
async def update_template(
    template_id: UUID,
    payload: RubricTemplateUpdate,
    service: RubricService = Depends(get_rubric_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> RubricTemplateEnvelope:
    template = service.update_template(template_id, payload, actor_id)
    return RubricTemplateEnvelope(template=template, message="Rubric template updated")


@router.delete(
    "/rubric-templates/{template_id}",
    response_model=DeleteResponse,
    responses=NOT_FOUND_RESPONSE,
    summary="Delete rubric template and its criteria",
)
async def delete_template(
    template_id: UUID,
    service: RubricService = Depends(get_rubric_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> DeleteResponse:
    service.delete_template(template_id, actor_id)
    return DeleteResponse(id=str(template_id), message="Rubric template deleted")


#  Criteria


@router.post(
    "/rubric-templates/{template_id}/criteria",
    response_model=RubricCriterionEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=NOT_FOUND_RESPONSE,
    summary="Add a criterion to a template",
)
async def add_criterion(
    template_id: UUID,
    payload: RubricCriterionCreate,
    service: RubricService = Depends(get_rubric_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> RubricCriterionEnvelope:
    criterion = service.add_criterion(template_id, payload, actor_id)
    return RubricCriterionEnvelope(criterion=criterion, message="Criterion added")


@router.put(
    "/rubric-templates/{template_id}/scale-levels",
    response_model=RubricScaleLevelsEnvelope,
    responses=NOT_FOUND_RESPONSE,
    summary="Replace scale levels",
    description="Sets the adjectival label for each score (1-5), e.g. 5 = Professional / Accomplished.",
)
async def set_scale_levels(
    template_id: UUID,
    payload: RubricScaleLevelsUpdate,
    service: RubricService = Depends(get_rubric_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> RubricScaleLevelsEnvelope:
    levels = service.set_scale_levels(template_id, payload, actor_id)
    return RubricScaleLevelsEnvelope(template_id=template_id, levels=levels, message="Scale levels saved")


@router.patch("/rubric-criteria/{criterion_id}", response_model=RubricCriterionEnvelope, summary="Update criterion")
async def update_criterion(
    criterion_id: UUID,
    payload: RubricCriterionUpdate,
    service: RubricService = Depends(get_rubric_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> RubricCriterionEnvelope:
    criterion = service.update_criterion(criterion_id, payload, actor_id)
    return RubricCriterionEnvelope(criterion=criterion, message="Criterion updated")


@router.delete("/rubric-criteria/{criterion_id}", response_model=DeleteResponse, summary="Delete criterion")
async def delete_criterion(
    criterion_id: UUID,
    service: RubricService = Depends(get_rubric_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> DeleteResponse:
    service.delete_criterion(criterion_id, actor_id)
    return DeleteResponse(id=str(criterion_id), message="Criterion deleted")

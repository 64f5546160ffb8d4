"""
Evaluations Router - Thesis Defense Platform
thesis_app/routers/evaluations.py

Panel evaluations: assignment, rubric scoring, panel notes (extras), submit
and lock.

The detail endpoint returns the rubric sheet with the aggregated
score summary (rows, scored count, weighted average) and the
evaluation percentage used by rankings.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from thesis_app.config import settings
from thesis_app.core.dependencies import get_evaluation_service
from thesis_app.core.errors import get_actor_id
from thesis_app.models.common import ErrorResponse
from thesis_app.models.enumerations import AssignMode, EvaluationStatus
from thesis_app.models.evaluation import (
    AssignRequest,
    AssignResponse,
    EvaluationDetailResponse,
    EvaluationEnvelope,
    EvaluationExtrasResponse,
    EvaluationExtrasUpdate,
    EvaluationListResponse,
    ScoresUpsert,
    ScoresUpsertResponse,
    UnassignResponse,
)
from thesis_app.services.evaluation_service import EvaluationService

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["Evaluations"])

STATE_CONFLICT_RESPONSE = {
    409: {
        "model": ErrorResponse,
        "description": "Evaluation is submitted or locked",
        "content": {
            "application/json": {
                "example": {
                    "ok": False,
                    "error_code": "INVALID_STATE_TRANSITION",
                    "message": "Cannot move evaluation from 'locked' to 'submitted'",
                    "details": None,
                    "timestamp": "2026-01-28T01:19:36.806Z",
                }
            }
        },
    },
}


#  Assignment


@router.post(
    "/evaluations/assign",
    response_model=AssignResponse,
    responses={400: {"model": ErrorResponse, "description": "Evaluator is not staff or panelist"}},
    summary="Assign evaluators to a defense",
    description=(
        "mode=single assigns one evaluator and is idempotent. "
        "mode=panelists creates a pending evaluation for every panelist of the schedule."
    ),
)
async def assign(
    payload: AssignRequest,
    service: EvaluationService = Depends(get_evaluation_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> AssignResponse:
    if payload.mode == AssignMode.PANELISTS:
        created_count = service.assign_panelists(payload.schedule_id, actor_id)
        return AssignResponse(
            mode=payload.mode,
            created=created_count > 0,
            created_count=created_count,
            message=f"{created_count} evaluation(s) created",
        )

    evaluation, created = service.assign(payload.schedule_id, payload.evaluator_id, actor_id)
    return AssignResponse(
        mode=payload.mode,
        created=created,
        created_count=1 if created else 0,
        id=evaluation["id"],
        message="Evaluator assigned" if created else "Evaluator already assigned",
    )


@router.delete(
    "/evaluations/assign",
    response_model=UnassignResponse,
    responses=STATE_CONFLICT_RESPONSE,
    summary="Remove an evaluator assignment",
)
async def unassign(
    schedule_id: UUID = Query(...),
    evaluator_id: UUID = Query(...),
    force: bool = Query(False, description="Also remove submitted or locked evaluations"),
    service: EvaluationService = Depends(get_evaluation_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> UnassignResponse:
    deleted = service.unassign(schedule_id, evaluator_id, force=force, actor_id=actor_id)
    return UnassignResponse(
        deleted=deleted,
        message="Assignment removed" if deleted else "No assignment found",
    )


#  Evaluations


@router.get("/evaluations", response_model=EvaluationListResponse, summary="List evaluations")
async def list_evaluations(
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    schedule_id: Optional[UUID] = Query(None),
    evaluator_id: Optional[UUID] = Query(None),
    evaluation_status: Optional[EvaluationStatus] = Query(None, alias="status"),
    service: EvaluationService = Depends(get_evaluation_service),
) -> EvaluationListResponse:
    items, total = service.list(
        limit,
        offset,
        schedule_id=schedule_id,
        evaluator_id=evaluator_id,
        status=evaluation_status.value if evaluation_status else None,
    )
    return EvaluationListResponse(items=items, total=total, limit=limit, offset=offset)


@router.get(
    "/evaluations/{evaluation_id}",
    response_model=EvaluationDetailResponse,
    summary="Evaluation detail with score summary",
)
async def get_evaluation(
    evaluation_id: UUID,
    service: EvaluationService = Depends(get_evaluation_service),
) -> EvaluationDetailResponse:
    return service.detail(evaluation_id)


@router.put(
    "/evaluations/{evaluation_id}/scores",
    response_model=ScoresUpsertResponse,
    responses={
        **STATE_CONFLICT_RESPONSE,
        422: {"model": ErrorResponse, "description": "Score out of range or criterion not in template"},
    },
    summary="Save criterion scores",
    description="Upserts scores by (criterion, target). A pending evaluation moves to in_progress.",
)
async def save_scores(
    evaluation_id: UUID,
    payload: ScoresUpsert,
    service: EvaluationService = Depends(get_evaluation_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> ScoresUpsertResponse:
    saved, evaluation = service.save_scores(evaluation_id, payload.items, actor_id)
    return ScoresUpsertResponse(
        evaluation_id=evaluation_id,
        saved=saved,
        status=evaluation["status"],
        message=f"Saved {saved} score(s)",
    )


@router.get(
    "/evaluations/{evaluation_id}/extras",
    response_model=EvaluationExtrasResponse,
    summary="Get panel notes",
    description="Overall and system comments plus per-member remarks. Empty object when none were saved.",
)
async def get_extras(
    evaluation_id: UUID,
    service: EvaluationService = Depends(get_evaluation_service),
) -> EvaluationExtrasResponse:
    return EvaluationExtrasResponse(**service.get_extras(evaluation_id))


@router.put(
    "/evaluations/{evaluation_id}/extras",
    response_model=EvaluationExtrasResponse,
    responses=STATE_CONFLICT_RESPONSE,
    summary="Save panel notes",
    description="Merges the given keys into the stored notes. Refused once the evaluation is locked.",
)
async def save_extras(
    evaluation_id: UUID,
    payload: EvaluationExtrasUpdate,
    service: EvaluationService = Depends(get_evaluation_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> EvaluationExtrasResponse:
    saved = service.save_extras(evaluation_id, payload.extras, actor_id)
    return EvaluationExtrasResponse(**saved, message="Panel notes saved")


@router.post(
    "/evaluations/{evaluation_id}/submit",
    response_model=EvaluationEnvelope,
    responses=STATE_CONFLICT_RESPONSE,
    summary="Submit evaluation",
)
async def submit_evaluation(
    evaluation_id: UUID,
    service: EvaluationService = Depends(get_evaluation_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> EvaluationEnvelope:
    return EvaluationEnvelope(evaluation=service.submit(evaluation_id, actor_id), message="Evaluation submitted")


@router.post(
    "/evaluations/{evaluation_id}/lock",
    response_model=EvaluationEnvelope,
    responses=STATE_CONFLICT_RESPONSE,
    summary="Lock evaluation",
)
async def lock_evaluation(
    evaluation_id: UUID,
    service: EvaluationService = Depends(get_evaluation_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> EvaluationEnvelope:
    return EvaluationEnvelope(evaluation=service.lock(evaluation_id, actor_id), message="Evaluation locked")

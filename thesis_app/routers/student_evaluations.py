"""
Student Evaluations Router - Thesis Defense Platform
thesis_app/routers/student_evaluations.py

Post-defense feedback forms filled in by group members.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from thesis_app.config import settings
from thesis_app.core.dependencies import get_student_feedback_service
from thesis_app.core.errors import get_actor_id
from thesis_app.models.enumerations import StudentEvaluationStatus
from thesis_app.models.student_evaluation import (
    AnswersUpdate,
    StudentEvaluationCreate,
    StudentEvaluationEnvelope,
    StudentEvaluationListResponse,
)
from thesis_app.services.student_feedback_service import StudentFeedbackService

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["Student Evaluations"])


@router.get("/student-evaluations", response_model=StudentEvaluationListResponse, summary="List student feedback")
async def list_student_evaluations(
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    schedule_id: Optional[UUID] = Query(None),
    student_id: Optional[UUID] = Query(None),
    feedback_status: Optional[StudentEvaluationStatus] = Query(None, alias="status"),
    service: StudentFeedbackService = Depends(get_student_feedback_service),
) -> StudentEvaluationListResponse:
    items, total = service.list(
        limit,
        offset,
        schedule_id=schedule_id,
        student_id=student_id,
        status=feedback_status.value if feedback_status else None,
    )
    return StudentEvaluationListResponse(items=items, total=total, limit=limit, offset=offset)


@router.post(
    "/student-evaluations",
    response_model=StudentEvaluationEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Open a feedback form",
    description="Returns the existing form (200) when the student already has one for this defense.",
)
async def create_student_evaluation(
    payload: StudentEvaluationCreate,
    response: Response,
    service: StudentFeedbackService = Depends(get_student_feedback_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> StudentEvaluationEnvelope:
    record, created = service.create(payload.schedule_id, payload.student_id, actor_id)
    if not created:
        response.status_code = status.HTTP_200_OK
    return StudentEvaluationEnvelope(
        student_evaluation=record,
        message="Feedback form created" if created else "Feedback form already exists",
    )


@router.get(
    "/student-evaluations/{feedback_id}",
    response_model=StudentEvaluationEnvelope,
    summary="Get feedback form",
)
async def get_student_evaluation(
    feedback_id: UUID,
    service: StudentFeedbackService = Depends(get_student_feedback_service),
) -> StudentEvaluationEnvelope:
    return StudentEvaluationEnvelope(student_evaluation=service.get(feedback_id))


@router.patch(
    "/student-evaluations/{feedback_id}/answers",
    response_model=StudentEvaluationEnvelope,
    summary="Save answers",
    description="Merges the given answers into the stored ones. Only pending forms are editable.",
)
async def save_answers(
    feedback_id: UUID,
    payload: AnswersUpdate,
    service: StudentFeedbackService = Depends(get_student_feedback_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> StudentEvaluationEnvelope:
    record = service.save_answers(feedback_id, payload.answers, actor_id)
    return StudentEvaluationEnvelope(student_evaluation=record, message="Answers saved")


@router.post(
    "/student-evaluations/{feedback_id}/submit",
    response_model=StudentEvaluationEnvelope,
    summary="Submit feedback form",
)
async def submit_student_evaluation(
    feedback_id: UUID,
    service: StudentFeedbackService = Depends(get_student_feedback_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> StudentEvaluationEnvelope:
    return StudentEvaluationEnvelope(
        student_evaluation=service.submit(feedback_id, actor_id), message="Feedback submitted"
    )


@router.post(
    "/student-evaluations/{feedback_id}/lock",
    response_model=StudentEvaluationEnvelope,
    summary="Lock feedback form",
)
async def lock_student_evaluation(
    feedback_id: UUID,
    service: StudentFeedbackService = Depends(get_student_feedback_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> StudentEvaluationEnvelope:
    return StudentEvaluationEnvelope(student_evaluation=service.lock(feedback_id, actor_id), message="Feedback locked")

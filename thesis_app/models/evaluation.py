from pydantic import BaseModel, Field, model_validator
from uuid import UUID
from datetime import datetime
from typing import Any, Dict, List, Optional

from thesis_app.models.common import Envelope, ListEnvelope
from thesis_app.models.defense_schedule import DefenseScheduleResponse
from thesis_app.models.enumerations import AssignMode, EvaluationStatus, TargetType
from thesis_app.scoring.aggregator import EvaluationPercentage, ScoreSummary


class EvaluationResponse(BaseModel):
    id: UUID
    schedule_id: UUID
    evaluator_id: UUID
    evaluator_name: Optional[str] = None
    status: EvaluationStatus = EvaluationStatus.PENDING
    submitted_at: Optional[datetime] = None
    locked_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class EvaluationEnvelope(Envelope):
    evaluation: EvaluationResponse


class EvaluationListResponse(ListEnvelope):
    items: List[EvaluationResponse]


class AssignRequest(BaseModel):
    """
    Assign evaluators to a defense schedule.

    mode=single:    evaluator_id is required.
    mode=panelists: every panelist of the schedule gets an evaluation.
    """

    mode: AssignMode = AssignMode.SINGLE
    schedule_id: UUID
    evaluator_id: Optional[UUID] = None

    @model_validator(mode="after")
    def require_evaluator_for_single(self):
        if self.mode == AssignMode.SINGLE and self.evaluator_id is None:
            raise ValueError("evaluator_id is required when mode is 'single'")
        return self


class AssignResponse(Envelope):
    mode: AssignMode
    created: bool = False
    created_count: int = 0
    id: Optional[UUID] = None


class UnassignResponse(Envelope):
    deleted: bool


class ScoreItem(BaseModel):
    criterion_id: UUID
    score: float = Field(..., allow_inf_nan=False)
    comment: Optional[str] = Field(None, max_length=5000)
    target_type: Optional[TargetType] = Field(None, description="Defaults to the schedule's group")
    target_id: Optional[UUID] = None

    @model_validator(mode="after")
    def student_target_needs_id(self):
        if self.target_type == TargetType.STUDENT and self.target_id is None:
            raise ValueError("target_id is required when target_type is 'student'")
        return self


class ScoresUpsert(BaseModel):
    items: List[ScoreItem] = Field(..., min_length=1)


class EvaluationScoreResponse(BaseModel):
    id: Optional[UUID] = None
    evaluation_id: UUID
    criterion_id: UUID
    target_type: TargetType = TargetType.GROUP
    target_id: Optional[UUID] = None
    score: Optional[float] = None
    comment: Optional[str] = None


class ScoresUpsertResponse(Envelope):
    evaluation_id: UUID
    saved: int
    status: EvaluationStatus


class EvaluationExtrasUpdate(BaseModel):
    """
    Free-form panel notes, merged key-by-key into the stored object.

    Typical keys: overall_comment, system_comment, members (student id -> score/comment).
    """
    extras: Dict[str, Any] = Field(default_factory=dict)


class EvaluationExtrasResponse(Envelope):
    evaluation_id: UUID
    extras: Dict[str, Any] = Field(default_factory=dict)
    updated_at: Optional[datetime] = None


class CriterionScoreRow(BaseModel):
    """A rubric criterion joined with the evaluator's score for it (None when unscored)."""
    criterion_id: UUID
    criterion: str
    description: Optional[str] = None
    weight: float = 1.0
    min_score: Optional[int] = None
    max_score: Optional[int] = None
    score: Optional[float] = None
    comment: Optional[str] = None


class EvaluationDetailResponse(Envelope):
    evaluation: EvaluationResponse
    schedule: Optional[DefenseScheduleResponse] = None
    criteria: List[CriterionScoreRow] = Field(default_factory=list)
    student_scores: List[EvaluationScoreResponse] = Field(default_factory=list)
    summary: ScoreSummary
    percentage: EvaluationPercentage

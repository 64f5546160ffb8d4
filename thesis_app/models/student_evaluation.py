from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import Any, Dict, List, Optional

from thesis_app.models.common import Envelope, ListEnvelope
from thesis_app.models.enumerations import StudentEvaluationStatus


class StudentEvaluationCreate(BaseModel):
    schedule_id: UUID
    student_id: UUID


class AnswersUpdate(BaseModel):
    """Answers are merged key-by-key into the stored object."""
    answers: Dict[str, Any] = Field(default_factory=dict)


class StudentEvaluationResponse(BaseModel):
    id: UUID
    schedule_id: UUID
    student_id: UUID
    status: StudentEvaluationStatus = StudentEvaluationStatus.PENDING
    answers: Dict[str, Any] = Field(default_factory=dict)
    submitted_at: Optional[datetime] = None
    locked_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StudentEvaluationEnvelope(Envelope):
    student_evaluation: StudentEvaluationResponse


class StudentEvaluationListResponse(ListEnvelope):
    items: List[StudentEvaluationResponse]

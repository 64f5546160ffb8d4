from pydantic import BaseModel, Field
from datetime import date
from typing import Dict, List, Optional

from thesis_app.models.common import Envelope


class DateRange(BaseModel):
    date_from: date = Field(..., alias="from")
    date_to: date = Field(..., alias="to")

    model_config = {"populate_by_name": True}


class CountBucket(BaseModel):
    key: str
    count: int


class UsersSummary(BaseModel):
    total: int = 0
    by_status: Dict[str, int] = Field(default_factory=dict)
    by_role: Dict[str, int] = Field(default_factory=dict)


class ThesisSummary(BaseModel):
    groups_total: int = 0
    memberships_total: int = 0
    unassigned_adviser: int = 0
    by_program: List[CountBucket] = Field(default_factory=list)


class DefensesSummary(BaseModel):
    total_in_range: int = 0
    by_status: List[CountBucket] = Field(default_factory=list)
    by_room: List[CountBucket] = Field(default_factory=list)
    by_month: List[CountBucket] = Field(default_factory=list)


class EvaluationsBucket(BaseModel):
    total_in_range: int = 0
    by_status: List[CountBucket] = Field(default_factory=list)


class EvaluationsSummary(BaseModel):
    panel: EvaluationsBucket = Field(default_factory=EvaluationsBucket)
    student: EvaluationsBucket = Field(default_factory=EvaluationsBucket)


class AuditSummary(BaseModel):
    total_in_range: int = 0
    top_actions: List[CountBucket] = Field(default_factory=list)
    top_actors: List[CountBucket] = Field(default_factory=list)
    daily: List[CountBucket] = Field(default_factory=list)


class ReportsSummary(Envelope):
    range: DateRange
    program: Optional[str] = None
    term: Optional[str] = None
    users: UsersSummary = Field(default_factory=UsersSummary)
    thesis: ThesisSummary = Field(default_factory=ThesisSummary)
    defenses: DefensesSummary = Field(default_factory=DefensesSummary)
    evaluations: EvaluationsSummary = Field(default_factory=EvaluationsSummary)
    audit: AuditSummary = Field(default_factory=AuditSummary)

from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from typing import List, Optional

from thesis_app.models.common import Envelope


class GroupRankingResponse(BaseModel):
    group_id: UUID
    group_title: Optional[str] = None
    group_percentage: Optional[float] = None
    submitted_evaluations: int = 0
    latest_defense_at: Optional[datetime] = None
    rank: int


class StudentRankingResponse(BaseModel):
    student_id: UUID
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    group_id: Optional[UUID] = None
    group_title: Optional[str] = None
    student_percentage: Optional[float] = None
    submitted_evaluations: int = 0
    latest_defense_at: Optional[datetime] = None
    rank: int


class GroupRankingListResponse(Envelope):
    items: List[GroupRankingResponse]
    total: int


class StudentRankingListResponse(Envelope):
    items: List[StudentRankingResponse]
    total: int


class GroupRankingEnvelope(Envelope):
    ranking: GroupRankingResponse


class StudentRankingEnvelope(Envelope):
    ranking: StudentRankingResponse

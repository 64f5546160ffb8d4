from pydantic import BaseModel, Field, field_validator
from uuid import UUID
from datetime import datetime, timezone
from typing import List, Optional

from thesis_app.models.common import Envelope, ListEnvelope
from thesis_app.models.enumerations import ScheduleStatus, UserRole


def _as_utc(v: Optional[datetime]) -> Optional[datetime]:
    if v is None:
        return v
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v.astimezone(timezone.utc)


class DefenseScheduleBase(BaseModel):
    group_id: Optional[UUID] = None
    scheduled_at: Optional[datetime] = Field(None, description="Defense start time (stored as UTC)")
    room: Optional[str] = Field(None, max_length=255)
    status: Optional[ScheduleStatus] = None
    rubric_template_id: Optional[UUID] = Field(
        None, description="Rubric used by the panel; the active template is used when omitted"
    )

    @field_validator("scheduled_at")
    @classmethod
    def normalize_scheduled_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)


class DefenseScheduleCreate(DefenseScheduleBase):
    group_id: UUID
    scheduled_at: datetime
    status: ScheduleStatus = ScheduleStatus.SCHEDULED


class DefenseScheduleUpdate(DefenseScheduleBase):
    pass


class DefenseScheduleResponse(BaseModel):
    id: UUID
    group_id: UUID
    group_title: Optional[str] = None
    scheduled_at: datetime
    room: Optional[str] = None
    status: ScheduleStatus = ScheduleStatus.SCHEDULED
    rubric_template_id: Optional[UUID] = None
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DefenseScheduleEnvelope(Envelope):
    schedule: DefenseScheduleResponse


class DefenseScheduleListResponse(ListEnvelope):
    items: List[DefenseScheduleResponse]


class PanelistAdd(BaseModel):
    staff_id: UUID


class PanelistResponse(BaseModel):
    staff_id: UUID
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[UserRole] = None


class PanelistListResponse(Envelope):
    schedule_id: UUID
    panelists: List[PanelistResponse]

from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import List, Optional

from thesis_app.models.common import Envelope, ListEnvelope


class ThesisGroupBase(BaseModel):
    """
    Base Pydantic model for a thesis group.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=500, description="Thesis title")
    adviser_id: Optional[UUID] = Field(None, description="Staff user advising the group")
    program: Optional[str] = Field(None, max_length=255, description="Academic program, e.g. BSCS")
    term: Optional[str] = Field(None, max_length=100, description="Academic term, e.g. 2025-2026 1st")


class ThesisGroupCreate(ThesisGroupBase):
    title: str = Field(..., min_length=1, max_length=500)


class ThesisGroupUpdate(ThesisGroupBase):
    pass


class ThesisGroupResponse(BaseModel):
    id: UUID
    title: str
    adviser_id: Optional[UUID] = None
    program: Optional[str] = None
    term: Optional[str] = None
    member_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ThesisGroupEnvelope(Envelope):
    group: ThesisGroupResponse


class ThesisGroupListResponse(ListEnvelope):
    items: List[ThesisGroupResponse]


class GroupMemberResponse(BaseModel):
    student_id: UUID
    name: Optional[str] = None
    email: Optional[str] = None


class MemberAdd(BaseModel):
    student_id: UUID


class MembersReplace(BaseModel):
    student_ids: List[UUID] = Field(default_factory=list)


class GroupMembersResponse(Envelope):
    group_id: UUID
    members: List[GroupMemberResponse]

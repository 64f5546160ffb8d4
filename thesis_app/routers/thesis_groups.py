"""
Thesis Groups Router - Thesis Defense Platform
thesis_app/routers/thesis_groups.py

Thesis groups and their student membership.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from thesis_app.config import settings
from thesis_app.core.dependencies import (
    get_audit_service,
    get_thesis_group_repository,
    get_user_repository,
)
from thesis_app.core.errors import get_actor_id, raise_error, raise_not_found
from thesis_app.models.common import DeleteResponse, ErrorResponse
from thesis_app.models.enumerations import EVALUATOR_ROLES, UserRole
from thesis_app.models.thesis_group import (
    GroupMembersResponse,
    MemberAdd,
    MembersReplace,
    ThesisGroupCreate,
    ThesisGroupEnvelope,
    ThesisGroupListResponse,
    ThesisGroupUpdate,
)
from thesis_app.repositories.thesis_group_repository import ThesisGroupRepository
from thesis_app.repositories.user_repository import UserRepository
from thesis_app.services.audit_service import AuditService

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["Thesis Groups"])



#  Helper Functions


def _require_group(repo: ThesisGroupRepository, group_id: UUID) -> dict:
    group = repo.get_by_id(group_id)
    if not group:
        raise_not_found("thesis group")
    return group


def _require_students(users: UserRepository, student_ids: List[UUID]) -> None:
    """Every id must be an existing user with the student role."""
    found = {str(u["id"]).lower(): u for u in users.get_many(student_ids)}
    for student_id in student_ids:
        user = found.get(str(student_id).lower())
        if user is None:
            raise_not_found("user")
        if user["role"] != UserRole.STUDENT.value:
            raise_error(
                status.HTTP_400_BAD_REQUEST,
                "ROLE_MISMATCH",
                f"User {student_id} is not a student",
            )


def _require_adviser(users: UserRepository, adviser_id: Optional[UUID]) -> None:
    if adviser_id is None:
        return
    adviser = users.get_by_id(adviser_id)
    if adviser is None:
        raise_not_found("user")
    if adviser["role"] not in EVALUATOR_ROLES + (UserRole.ADMIN.value,):
        raise_error(status.HTTP_400_BAD_REQUEST, "ROLE_MISMATCH", f"User {adviser_id} cannot advise a group")



#  Routes


@router.get("/thesis-groups", response_model=ThesisGroupListResponse, summary="List thesis groups")
async def list_groups(
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    program: Optional[str] = Query(None, max_length=255),
    term: Optional[str] = Query(None, max_length=100),
    adviser_id: Optional[UUID] = Query(None),
    q: Optional[str] = Query(None, max_length=255, description="Matches the thesis title"),
    repo: ThesisGroupRepository = Depends(get_thesis_group_repository),
) -> ThesisGroupListResponse:
    items, total = repo.list(limit, offset, program=program, term=term, adviser_id=adviser_id, q=q)
    return ThesisGroupListResponse(items=items, total=total, limit=limit, offset=offset)


@router.post(
    "/thesis-groups",
    response_model=ThesisGroupEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse, "description": "Adviser not found"}},
    summary="Create thesis group",
)
async def create_group(
    payload: ThesisGroupCreate,
    repo: ThesisGroupRepository = Depends(get_thesis_group_repository),
    users: UserRepository = Depends(get_user_repository),
    audit: AuditService = Depends(get_audit_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> ThesisGroupEnvelope:
    _require_adviser(users, payload.adviser_id)
    group = repo.create(
        title=payload.title.strip(),
        adviser_id=payload.adviser_id,
        program=payload.program,
        term=payload.term,
    )
    audit.record("thesis_group.create", "thesis_group", actor_id, group["id"], {"title": group["title"]})
    return ThesisGroupEnvelope(group=group, message="Thesis group created")


@router.get("/thesis-groups/{group_id}", response_model=ThesisGroupEnvelope, summary="Get thesis group")
async def get_group(
    group_id: UUID,
    repo: ThesisGroupRepository = Depends(get_thesis_group_repository),
) -> ThesisGroupEnvelope:
    return ThesisGroupEnvelope(group=_require_group(repo, group_id))


@router.patch("/thesis-groups/{group_id}", response_model=ThesisGroupEnvelope, summary="Update thesis group")
async def update_group(
    group_id: UUID,
    payload: ThesisGroupUpdate,
    repo: ThesisGroupRepository = Depends(get_thesis_group_repository),
    users: UserRepository = Depends(get_user_repository),
    audit: AuditService = Depends(get_audit_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> ThesisGroupEnvelope:
    _require_group(repo, group_id)
    _require_adviser(users, payload.adviser_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    group = repo.update(group_id, changes)
    audit.record("thesis_group.update", "thesis_group", actor_id, group_id, changes)
    return ThesisGroupEnvelope(group=group, message="Thesis group updated")


@router.delete("/thesis-groups/{group_id}", response_model=DeleteResponse, summary="Delete thesis group")
async def delete_group(
    group_id: UUID,
    repo: ThesisGroupRepository = Depends(get_thesis_group_repository),
    audit: AuditService = Depends(get_audit_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> DeleteResponse:
    _require_group(repo, group_id)
    repo.delete(group_id)
    audit.record("thesis_group.delete", "thesis_group", actor_id, group_id)
    return DeleteResponse(id=str(group_id), message="Thesis group deleted")



#  Membership


@router.get(
    "/thesis-groups/{group_id}/members",
    response_model=GroupMembersResponse,
    summary="List group members",
)
async def list_members(
    group_id: UUID,
    repo: ThesisGroupRepository = Depends(get_thesis_group_repository),
) -> GroupMembersResponse:
    _require_group(repo, group_id)
    return GroupMembersResponse(group_id=group_id, members=repo.list_members(group_id))


@router.post(
    "/thesis-groups/{group_id}/members",
    response_model=GroupMembersResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse, "description": "Student already in group"}},
    summary="Add a student to the group",
)
async def add_member(
    group_id: UUID,
    payload: MemberAdd,
    repo: ThesisGroupRepository = Depends(get_thesis_group_repository),
    users: UserRepository = Depends(get_user_repository),
    audit: AuditService = Depends(get_audit_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> GroupMembersResponse:
    _require_group(repo, group_id)
    _require_students(users, [payload.student_id])
    if not repo.add_member(group_id, payload.student_id):
        raise_error(status.HTTP_409_CONFLICT, "DUPLICATE_MEMBER", "Student is already a member of this group")
    audit.record("thesis_group.add_member", "thesis_group", actor_id, group_id, {"student_id": str(payload.student_id)})
    return GroupMembersResponse(group_id=group_id, members=repo.list_members(group_id), message="Member added")


@router.put(
    "/thesis-groups/{group_id}/members",
    response_model=GroupMembersResponse,
    summary="Replace the member list",
)
async def replace_members(
    group_id: UUID,
    payload: MembersReplace,
    repo: ThesisGroupRepository = Depends(get_thesis_group_repository),
    users: UserRepository = Depends(get_user_repository),
    audit: AuditService = Depends(get_audit_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> GroupMembersResponse:
    _require_group(repo, group_id)
    _require_students(users, payload.student_ids)
    repo.replace_members(group_id, payload.student_ids)
    audit.record(
        "thesis_group.replace_members", "thesis_group", actor_id, group_id,
        {"student_ids": [str(s) for s in payload.student_ids]},
    )
    return GroupMembersResponse(group_id=group_id, members=repo.list_members(group_id), message="Members updated")


@router.delete(
    "/thesis-groups/{group_id}/members/{student_id}",
    response_model=DeleteResponse,
    summary="Remove a student from the group",
)
async def remove_member(
    group_id: UUID,
    student_id: UUID,
    repo: ThesisGroupRepository = Depends(get_thesis_group_repository),
    audit: AuditService = Depends(get_audit_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> DeleteResponse:
    _require_group(repo, group_id)
    if not repo.remove_member(group_id, student_id):
        raise_not_found("group member")
    audit.record("thesis_group.remove_member", "thesis_group", actor_id, group_id, {"student_id": str(student_id)})
    return DeleteResponse(id=str(student_id), message="Member removed")

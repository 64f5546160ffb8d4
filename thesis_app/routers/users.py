"""
Users Router - Thesis Defense Platform
thesis_app/routers/users.py

User directory: students, staff, panelists and administrators.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from thesis_app.config import settings
from thesis_app.core.dependencies import get_audit_service, get_user_repository
from thesis_app.core.errors import get_actor_id, raise_error, raise_not_found
from thesis_app.models.common import ErrorResponse
from thesis_app.models.enumerations import UserRole, UserStatus
from thesis_app.models.user import UserCreate, UserEnvelope, UserListResponse, UserUpdate
from thesis_app.repositories.user_repository import UserRepository
from thesis_app.services.audit_service import AuditService

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["Users"])


def raise_duplicate_email(email: str):
    raise_error(status.HTTP_409_CONFLICT, "DUPLICATE_EMAIL", f"A user with email '{email}' already exists")



#  Routes


@router.get(
    "/users",
    response_model=UserListResponse,
    summary="List users",
    description="Paginated user directory with optional role/status filters and a name/email search.",
)
async def list_users(
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    role: Optional[UserRole] = Query(None),
    user_status: Optional[UserStatus] = Query(None, alias="status"),
    q: Optional[str] = Query(None, max_length=255, description="Matches name or email"),
    repo: UserRepository = Depends(get_user_repository),
) -> UserListResponse:
    items, total = repo.list(
        limit,
        offset,
        role=role.value if role else None,
        status=user_status.value if user_status else None,
        q=q,
    )
    return UserListResponse(items=items, total=total, limit=limit, offset=offset)


@router.post(
    "/users",
    response_model=UserEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {
            "model": ErrorResponse,
            "description": "Email already registered",
            "content": {
                "application/json": {
                    "example": {
                        "ok": False,
                        "error_code": "DUPLICATE_EMAIL",
                        "message": "A user with email 'ana@school.edu' already exists",
                        "details": None,
                        "timestamp": "2026-01-28T01:19:36.806Z",
                    }
                }
            },
        },
    },
    summary="Create user",
)
async def create_user(
    payload: UserCreate,
    repo: UserRepository = Depends(get_user_repository),
    audit: AuditService = Depends(get_audit_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> UserEnvelope:
    if repo.get_by_email(payload.email):
        raise_duplicate_email(payload.email)

    user = repo.create(name=payload.name.strip(), email=payload.email, role=payload.role.value)
    audit.record("user.create", "user", actor_id, user["id"], {"email": user["email"], "role": user["role"]})
    return UserEnvelope(user=user, message="User created")


@router.get("/users/{user_id}", response_model=UserEnvelope, summary="Get user by ID")
async def get_user(
    user_id: UUID,
    repo: UserRepository = Depends(get_user_repository),
) -> UserEnvelope:
    user = repo.get_by_id(user_id)
    if not user:
        raise_not_found("user")
    return UserEnvelope(user=user)


@router.patch("/users/{user_id}", response_model=UserEnvelope, summary="Update user")
async def update_user(
    user_id: UUID,
    payload: UserUpdate,
    repo: UserRepository = Depends(get_user_repository),
    audit: AuditService = Depends(get_audit_service),
    actor_id: Optional[UUID] = Depends(get_actor_id),
) -> UserEnvelope:
    current = repo.get_by_id(user_id)
    if not current:
        raise_not_found("user")

    changes = payload.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    if "email" in changes and changes["email"] != current["email"]:
        existing = repo.get_by_email(changes["email"])
        if existing and str(existing["id"]).lower() != str(user_id).lower():
            raise_duplicate_email(changes["email"])

    user = repo.update(user_id, changes)
    audit.record("user.update", "user", actor_id, user_id, changes)
    return UserEnvelope(user=user, message="User updated")

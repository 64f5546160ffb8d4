"""
Audit Logs Router - Thesis Defense Platform
thesis_app/routers/audit_logs.py
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from thesis_app.config import settings
from thesis_app.core.dependencies import get_audit_service
from thesis_app.models.audit_log import AuditLogListResponse
from thesis_app.services.audit_service import AuditService

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["Audit Logs"])


@router.get(
    "/audit-logs",
    response_model=AuditLogListResponse,
    summary="List audit log entries",
    description="Newest first.",
)
async def list_audit_logs(
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    actor_id: Optional[UUID] = Query(None),
    action: Optional[str] = Query(None, max_length=100, description="e.g. evaluation.submit"),
    entity: Optional[str] = Query(None, max_length=100, description="e.g. evaluation"),
    service: AuditService = Depends(get_audit_service),
) -> AuditLogListResponse:
    items, total = service.list(limit, offset, actor_id=actor_id, action=action, entity=entity)
    return AuditLogListResponse(items=items, total=total, limit=limit, offset=offset)

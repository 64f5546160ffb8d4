from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import Any, Dict, List, Optional

from thesis_app.models.common import ListEnvelope


class AuditLogResponse(BaseModel):
    id: UUID
    actor_id: Optional[UUID] = None
    actor_name: Optional[str] = None
    action: str
    entity: str
    entity_id: Optional[UUID] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None


class AuditLogListResponse(ListEnvelope):
    items: List[AuditLogResponse]

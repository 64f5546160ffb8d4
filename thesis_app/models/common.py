from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional


class ErrorResponse(BaseModel):
    ok: bool = False
    error_code: str
    message: str
    details: Optional[dict] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Envelope(BaseModel):
    """Base for every successful response: { ok, message?, ...payload }."""
    ok: bool = True
    message: Optional[str] = None


class ListEnvelope(Envelope):
    """Pagination metadata shared by list responses; subclasses add `items`."""
    total: int = Field(..., ge=0)
    limit: int = Field(..., ge=1)
    offset: int = Field(..., ge=0)


class DeleteResponse(Envelope):
    id: str
    deleted: bool = True

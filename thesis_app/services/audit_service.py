"""
Audit Service - Thesis Defense Platform
thesis_app/services/audit_service.py

Records who changed what. Writing an audit entry must never fail the
request that triggered it, so repository errors are logged and dropped.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from thesis_app.core.exceptions import RepositoryException
from thesis_app.repositories.audit_log_repository import AuditLogRepository

logger = logging.getLogger(__name__)


class AuditService:
    def __init__(self, repo: AuditLogRepository):
        self.repo = repo

    def record(
        self,
        action: str,
        entity: str,
        actor_id: Optional[UUID] = None,
        entity_id: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        try:
            self.repo.create(
                action=action,
                entity=entity,
                actor_id=actor_id,
                entity_id=entity_id,
                details=details,
            )
        except RepositoryException as e:
            logger.warning(f"Audit write failed ({action} {entity} {entity_id}): {e.message}")

    def list(
        self,
        limit: int,
        offset: int,
        actor_id: Optional[UUID] = None,
        action: Optional[str] = None,
        entity: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        return self.repo.list(limit, offset, actor_id=actor_id, action=action, entity=entity)

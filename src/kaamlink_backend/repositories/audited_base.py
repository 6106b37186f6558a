"""Audited base repository with automatic audit logging."""

from typing import TypeVar, Type, Optional, Dict, Any
from uuid import UUID
from decimal import Decimal

from sqlalchemy.orm import Session
from sqlalchemy.inspection import inspect

from kaamlink_backend.core.base import Base
from kaamlink_backend.core.audit import AuditLogger, AuditAction
from .base import BaseRepository

ModelType = TypeVar("ModelType", bound=Base)


class AuditedRepository(BaseRepository[ModelType]):
    """Repository whose committed writes are followed by an audit entry."""

    def __init__(self, model: Type[ModelType]):
        super().__init__(model)
        self.audit_logger = AuditLogger()

    def model_to_dict(self, instance: ModelType) -> Dict[str, Any]:
        """JSON-safe snapshot of a row for audit logging."""
        result = {}
        for column in inspect(instance).mapper.column_attrs:
            value = getattr(instance, column.key)
            if isinstance(value, UUID):
                value = str(value)
            elif isinstance(value, Decimal):
                value = str(value)
            elif hasattr(value, "isoformat"):
                value = value.isoformat()
            result[column.key] = value
        return result

    def _record_id(self, instance: ModelType) -> UUID:
        return inspect(instance).identity[0]

    def create_with_audit(
        self,
        db: Session,
        actor_id: Optional[UUID] = None,
        **kwargs
    ) -> ModelType:
        """Create and commit a record, then write a CREATE audit entry."""
        instance = self.create(db, **kwargs)

        self.audit_logger.record(
            db,
            table_name=self.model.__tablename__,
            record_id=self._record_id(instance),
            action=AuditAction.CREATE,
            new_values=self.model_to_dict(instance),
            actor_id=actor_id,
        )
        return instance

    def update_with_audit(
        self,
        db: Session,
        id: UUID,
        actor_id: Optional[UUID] = None,
        **kwargs
    ) -> Optional[ModelType]:
        """Update and commit a record, then write an UPDATE audit entry."""
        instance = self.get_by_id(db, id)
        if not instance:
            return None

        old_values = self.model_to_dict(instance)

        updated = self.update(db, id, **kwargs)
        if not updated:
            return None

        self.audit_logger.record(
            db,
            table_name=self.model.__tablename__,
            record_id=id,
            action=AuditAction.UPDATE,
            old_values=old_values,
            new_values=self.model_to_dict(updated),
            actor_id=actor_id,
        )
        return updated

"""Audit logging for workflow writes.

Audit entries are secondary writes: they are committed after the primary
write of a step has already been committed, and a failure here is logged and
never propagated to the caller.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
from uuid import UUID, uuid4

from sqlalchemy import Column, String, DateTime, Text, Index
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import structlog

from .base import Base
from .custom_types import GUID, JSONType

logger = structlog.get_logger("audit")


class AuditAction(str, Enum):
    """Audit action types."""
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    OTP_ISSUED = "OTP_ISSUED"
    OTP_CONSUMED = "OTP_CONSUMED"
    SHIFT_STARTED = "SHIFT_STARTED"
    SHIFT_ENDED = "SHIFT_ENDED"


class AuditLog(Base):
    """Audit log model for tracking data modifications."""

    __tablename__ = "audit_logs"

    id = Column(GUID(), primary_key=True, default=uuid4)
    actor_id = Column(GUID(), nullable=True)  # null for system actions
    table_name = Column(String(255), nullable=False)
    record_id = Column(GUID(), nullable=False)
    action = Column(String(50), nullable=False)
    old_values = Column(JSONType, nullable=True)
    new_values = Column(JSONType, nullable=True)
    reason = Column(Text, nullable=True)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_audit_logs_record", "table_name", "record_id"),
    )

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, action='{self.action}', table='{self.table_name}')>"


class AuditLogger:
    """Service for creating audit log entries."""

    @staticmethod
    def record(
        db: Session,
        table_name: str,
        record_id: UUID,
        action: AuditAction,
        new_values: Optional[Dict[str, Any]] = None,
        old_values: Optional[Dict[str, Any]] = None,
        actor_id: Optional[UUID] = None,
        reason: Optional[str] = None,
    ) -> Optional[AuditLog]:
        """Write one audit entry in its own commit.

        Returns:
            The audit entry, or None when the write failed
        """
        audit_log = AuditLog(
            actor_id=actor_id,
            table_name=table_name,
            record_id=record_id,
            action=action.value,
            old_values=old_values,
            new_values=new_values,
            reason=reason,
        )

        try:
            db.add(audit_log)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(
                "Audit log write failed",
                table_name=table_name,
                record_id=str(record_id),
                action=action.value,
                error=str(e),
            )
            return None

        logger.info(
            "Audit log created",
            table_name=table_name,
            record_id=str(record_id),
            action=action.value,
            actor_id=str(actor_id) if actor_id else None,
        )
        return audit_log

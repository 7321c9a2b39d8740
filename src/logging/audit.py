"""Structured audit logging for per-user favorite activity.

Every favorite write and every rejected or failed toggle leaves an
``audit_event`` entry so cross-device reports can be traced afterwards.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from src.logging import get_logger

logger = get_logger(__name__)


class AuditEventType(str, Enum):
    """Types of auditable events."""

    FAVORITE_ADDED = "favorite_added"
    FAVORITE_REMOVED = "favorite_removed"
    FAVORITE_TOGGLE_FAILED = "favorite_toggle_failed"
    SIGN_IN_REQUIRED = "sign_in_required"
    SESSION_STARTED = "session_started"
    SESSION_STOPPED = "session_stopped"


class AuditLogger:
    """Centralized audit logging service."""

    @staticmethod
    def log_event(
        event_type: AuditEventType,
        actor_id: Optional[int],
        resource_type: str,
        resource_id: UUID | str,
        action: str,
        success: bool = True,
        metadata: Optional[dict[str, Any]] = None,
        error: Optional[str] = None,
    ) -> None:
        """
        Log an auditable event with structured context.

        Args:
            event_type: Type of audit event
            actor_id: Internal user ID, None for anonymous callers
            resource_type: Type of resource (deal, favorite, session)
            resource_id: ID of the affected resource
            action: Human-readable action description
            success: Whether the action succeeded
            metadata: Additional context
            error: Error message if action failed
        """
        audit_entry = {
            "event_type": event_type.value,
            "actor_id": actor_id,
            "resource_type": resource_type,
            "resource_id": str(resource_id),
            "action": action,
            "success": success,
            "timestamp": datetime.utcnow().isoformat(),
            "metadata": metadata or {},
        }

        if error:
            audit_entry["error"] = error

        logger.info("audit_event", **audit_entry)

    @staticmethod
    def log_favorite_added(actor_id: int, deal_id: UUID, favorite_id: UUID) -> None:
        """Log a confirmed favorite insert."""
        AuditLogger.log_event(
            event_type=AuditEventType.FAVORITE_ADDED,
            actor_id=actor_id,
            resource_type="deal",
            resource_id=deal_id,
            action="Added deal to favorites",
            metadata={"favorite_id": str(favorite_id)},
        )

    @staticmethod
    def log_favorite_removed(actor_id: int, deal_id: UUID, favorite_id: UUID) -> None:
        """Log a confirmed favorite delete."""
        AuditLogger.log_event(
            event_type=AuditEventType.FAVORITE_REMOVED,
            actor_id=actor_id,
            resource_type="deal",
            resource_id=deal_id,
            action="Removed deal from favorites",
            metadata={"favorite_id": str(favorite_id)},
        )

    @staticmethod
    def log_toggle_failed(actor_id: int, deal_id: UUID, error: str) -> None:
        """Log a favorite write rejected by the backend."""
        AuditLogger.log_event(
            event_type=AuditEventType.FAVORITE_TOGGLE_FAILED,
            actor_id=actor_id,
            resource_type="deal",
            resource_id=deal_id,
            action="Favorite toggle failed",
            success=False,
            error=error,
        )

    @staticmethod
    def log_sign_in_required(deal_id: UUID) -> None:
        """Log an anonymous favorite attempt."""
        AuditLogger.log_event(
            event_type=AuditEventType.SIGN_IN_REQUIRED,
            actor_id=None,
            resource_type="deal",
            resource_id=deal_id,
            action="Favorite toggle requires sign-in",
            success=False,
        )

    @staticmethod
    def log_session(actor_id: int, started: bool) -> None:
        """Log a favorite session starting or stopping."""
        AuditLogger.log_event(
            event_type=AuditEventType.SESSION_STARTED if started else AuditEventType.SESSION_STOPPED,
            actor_id=actor_id,
            resource_type="session",
            resource_id=str(actor_id),
            action="Session started" if started else "Session stopped",
        )

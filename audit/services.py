"""
Audit logging service for tracking registrar and administrator actions
"""
from .models import AuditLog
import logging

logger = logging.getLogger(__name__)


class AuditLogger:
    """Service for logging audit events"""

    @staticmethod
    def log_action(
        actor,
        action,
        entity_type,
        entity_id,
        entity_name='',
        description='',
        changes=None,
    ):
        """
        Create an audit log entry

        Args:
            actor: User performing the action, or None for system actions
            action: Action type (CREATE, UPDATE, APPROVE, ...)
            entity_type: Type of entity (course_upload, semester, ...)
            entity_id: ID of the affected entity
            entity_name: Human-readable name of the entity
            description: Description of the action
            changes: JSON-serialisable dict of changed values
        """
        audit_log = AuditLog.objects.create(
            actor=actor,
            actor_email=actor.email if actor else '',
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id),
            entity_name=str(entity_name)[:500],
            description=description,
            changes=changes or {},
        )
        logger.info(f"Audit log created: {audit_log}")
        return audit_log

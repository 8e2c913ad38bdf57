"""
Audit recorder.

Appends AuditLog entries for lifecycle actions. Recording is a side
effect of a committed mutation and must never fail it: every error is
logged and swallowed.
"""

import logging

from django.db import transaction

from .models import AuditLog

audit_logger = logging.getLogger('cira.audit')


class AuditRecorder:

    @staticmethod
    def record(action, resource_type, user_id=None, resource_id=None, details=None):
        """
        Append one audit entry.

        Returns the AuditLog, or None if it could not be written.
        """
        try:
            with transaction.atomic():
                return AuditLog.objects.create(
                    action=action,
                    resource_type=resource_type,
                    user_id=str(user_id) if user_id else None,
                    resource_id=str(resource_id) if resource_id else None,
                    details=details or {},
                )
        except Exception:
            audit_logger.error(
                f"Failed to record audit event {action} on {resource_type} {resource_id}",
                exc_info=True,
            )
            return None

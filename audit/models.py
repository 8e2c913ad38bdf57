"""
Audit models for the CIRA backend.

Implements an immutable, append-only trail of lifecycle actions:
- Report submission
- Status changes
- Manual and automatic assignment
- Comments

Design principles:
- Append-only: No updates or deletes allowed
- No foreign keys (stores IDs as strings so entries outlive their subjects)
- Timestamped
"""

import uuid
from django.db import models
from django.utils import timezone


class AuditAction:
    """Audit action constants."""
    REPORT_CREATED = 'report_created'
    REPORT_STATUS_CHANGED = 'report_status_changed'
    REPORT_ASSIGNED = 'report_assigned'
    REPORT_AUTO_ASSIGNED = 'report_auto_assigned'
    REPORT_COMMENT_ADDED = 'report_comment_added'
    REPORT_CONFIRMED = 'report_confirmed'

    CHOICES = [
        (REPORT_CREATED, 'Report Created'),
        (REPORT_STATUS_CHANGED, 'Report Status Changed'),
        (REPORT_ASSIGNED, 'Report Assigned'),
        (REPORT_AUTO_ASSIGNED, 'Report Auto-Assigned'),
        (REPORT_COMMENT_ADDED, 'Report Comment Added'),
        (REPORT_CONFIRMED, 'Report Confirmed'),
    ]


class ResourceType:
    """Kinds of records an audit entry points at."""
    REPORT = 'report'
    ASSIGNMENT = 'assignment'
    COMMENT = 'comment'

    CHOICES = [
        (REPORT, 'Report'),
        (ASSIGNMENT, 'Assignment'),
        (COMMENT, 'Comment'),
    ]


class AuditLogQuerySet(models.QuerySet):
    """
    Prevents any modifications to existing records.
    """

    def update(self, *args, **kwargs):
        """Prevent bulk updates on audit logs."""
        raise PermissionError("Audit logs are immutable and cannot be updated.")

    def delete(self, *args, **kwargs):
        """Prevent bulk deletes on audit logs."""
        raise PermissionError("Audit logs are immutable and cannot be deleted.")


class AuditLog(models.Model):
    """
    Immutable audit log entry.

    This model does not inherit from BaseModel: entries carry a single
    timestamp and are never modified.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    user_id = models.CharField(
        max_length=36,
        null=True,
        blank=True,
        db_index=True,
        help_text="UUID of user who performed the action (null for system)"
    )

    action = models.CharField(
        max_length=50,
        choices=AuditAction.CHOICES,
        db_index=True,
        help_text="Action being logged"
    )

    resource_type = models.CharField(
        max_length=30,
        choices=ResourceType.CHOICES,
        help_text="Type of entity being acted upon"
    )

    resource_id = models.CharField(
        max_length=36,
        null=True,
        blank=True,
        db_index=True,
        help_text="UUID of target entity (as string)"
    )

    details = models.JSONField(
        default=dict,
        blank=True,
        help_text="Additional structured data about the action"
    )

    timestamp = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="When the action occurred"
    )

    objects = AuditLogQuerySet.as_manager()

    class Meta:
        db_table = 'audit_logs'
        verbose_name = 'Audit Log'
        verbose_name_plural = 'Audit Logs'
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['action', 'timestamp'], name='audit_action_ts_idx'),
            models.Index(fields=['resource_type', 'resource_id'], name='audit_resource_idx'),
        ]

    def __str__(self):
        return f"{self.timestamp} | {self.action} | {self.user_id or 'system'}"

    def save(self, *args, **kwargs):
        """
        Override save to enforce append-only behavior.
        Only allows creation, not updates.
        """
        if not self._state.adding:
            raise PermissionError("Audit logs are immutable and cannot be updated.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Prevent deletion of audit logs."""
        raise PermissionError("Audit logs are immutable and cannot be deleted.")

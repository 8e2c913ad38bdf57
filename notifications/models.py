"""
Notification models for the CIRA backend.

Provides:
- Notification: persisted inbox entry, one per (event, recipient)
- DeviceToken: Expo push token registered by a mobile/web client

Design principles:
- The inbox is the durable record of every lifecycle event delivered
- Notifications are never deleted, only marked as read
- Ordered newest first
"""

from django.db import models
from django.utils import timezone

from core.models import BaseModel


class NotificationType:
    """Notification type constants."""
    REPORT_CREATED = 'report_created'
    REPORT_STATUS_CHANGED = 'report_status_changed'
    REPORT_COMMENTED = 'report_commented'
    REPORT_ASSIGNED = 'report_assigned'

    CHOICES = [
        (REPORT_CREATED, 'Report Created'),
        (REPORT_STATUS_CHANGED, 'Report Status Changed'),
        (REPORT_COMMENTED, 'Report Commented'),
        (REPORT_ASSIGNED, 'Report Assigned'),
    ]


class DevicePlatform:
    """Push device platforms."""
    IOS = 'ios'
    ANDROID = 'android'
    WEB = 'web'

    CHOICES = [
        (IOS, 'iOS'),
        (ANDROID, 'Android'),
        (WEB, 'Web'),
    ]


class NotificationQuerySet(models.QuerySet):
    """Notifications are never deleted."""

    def delete(self, *args, **kwargs):
        raise PermissionError("Notifications cannot be deleted.")

    def unread(self):
        return self.filter(is_read=False)

    def for_user(self, user):
        return self.filter(recipient=user)


class Notification(BaseModel):
    """
    Inbox notification for a user.

    Notifications are:
    - Linked to specific users (recipients)
    - Carrying event context in ``data`` (report id, status, comment id)
    - Ordered newest first
    - Never deleted (only marked as read)
    """

    recipient = models.ForeignKey(
        'authentication.User',
        on_delete=models.CASCADE,
        related_name='notifications',
        help_text="User who receives this notification"
    )

    notification_type = models.CharField(
        max_length=30,
        choices=NotificationType.CHOICES,
        db_index=True,
        help_text="Type of notification"
    )

    title = models.CharField(
        max_length=200,
        help_text="Short notification title"
    )

    body = models.TextField(
        help_text="Notification message body"
    )

    data = models.JSONField(
        default=dict,
        blank=True,
        help_text="Event context (report id, status, comment id)"
    )

    # Read tracking
    is_read = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether the notification has been read"
    )

    read_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the notification was read"
    )

    objects = NotificationQuerySet.as_manager()

    class Meta:
        db_table = 'notifications'
        verbose_name = 'Notification'
        verbose_name_plural = 'Notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['recipient', 'is_read', '-created_at'], name='notif_recipient_read_idx'),
            models.Index(fields=['recipient', '-created_at'], name='notif_recipient_created_idx'),
        ]

    def __str__(self):
        return f"[{self.recipient_id}] {self.title}"

    def mark_as_read(self):
        """Mark this notification as read."""
        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=['is_read', 'read_at', 'updated_at'])

    def delete(self, *args, **kwargs):
        raise PermissionError("Notifications cannot be deleted.")


class DeviceToken(BaseModel):
    """
    Expo push token for one device.

    A token belongs to whichever user registered it last.
    """

    user = models.ForeignKey(
        'authentication.User',
        on_delete=models.CASCADE,
        related_name='device_tokens',
    )

    token = models.CharField(
        max_length=255,
        unique=True,
        help_text="Expo push token"
    )

    platform = models.CharField(
        max_length=10,
        choices=DevicePlatform.CHOICES,
    )

    class Meta:
        db_table = 'device_tokens'
        verbose_name = 'Device Token'
        verbose_name_plural = 'Device Tokens'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.platform}:{self.token[:16]}"

"""
Notification services for the CIRA backend.

NotificationFanout delivers lifecycle events through every channel.
NotificationService owns the inbox and device-token operations used by
the notification views.

Usage:
    from notifications.services import get_fanout

    get_fanout().schedule(event)   # inside the mutation's transaction
"""

import logging

from celery import group
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone

from core.dispatch import run_on_commit
from core.exceptions import NotFound, ValidationError
from .channels import DeliveryResult, default_channels
from .models import DeviceToken, DevicePlatform, Notification, NotificationType

logger = logging.getLogger('cira.notifications')


class NotificationFanout:
    """
    Delivers one event through every channel, each in its own failure
    boundary. Nothing here raises to the caller.
    """

    def __init__(self, channels=None):
        self.channels = list(channels) if channels is not None else default_channels()

    def get_channel(self, name):
        for channel in self.channels:
            if channel.name == name:
                return channel
        raise KeyError(f"Unknown notification channel '{name}'")

    def run_channel(self, channel, event):
        try:
            result = channel.deliver(event)
        except Exception as e:
            logger.error(
                f"[Fanout] Channel '{channel.name}' failed for '{event.type}': {e}",
                exc_info=True,
            )
            return DeliveryResult(
                channel=channel.name,
                failed=len(event.recipient_ids),
                error=str(e) or e.__class__.__name__,
            )

        logger.info(
            f"[Fanout] {channel.name}: '{event.type}' delivered={result.delivered} failed={result.failed}"
        )
        return result

    def deliver(self, event):
        """Run every channel in this process and collect the results."""
        if not event.has_recipients:
            return []
        return [self.run_channel(channel, event) for channel in self.channels]

    def dispatch(self, event):
        """
        Run in-process channels (inbox, live) now and hand the deferred ones
        to workers, one task per channel so they proceed independently. A
        broker outage loses only the deferred channels.
        """
        from .tasks import deliver_via_channel

        results = [
            self.run_channel(channel, event)
            for channel in self.channels
            if not channel.deferred
        ]

        deferred = [channel.name for channel in self.channels if channel.deferred]
        if deferred:
            payload = event.to_payload()
            try:
                group(deliver_via_channel.s(name, payload) for name in deferred).apply_async()
            except Exception as e:
                logger.error(
                    f"[Fanout] Could not enqueue {', '.join(deferred)} for '{event.type}': {e}",
                    exc_info=True,
                )

        return results

    def schedule(self, event):
        """
        Deliver ``event`` once the current transaction commits.

        Nothing is delivered if the transaction rolls back.
        """
        if not event.has_recipients:
            return
        run_on_commit(self.dispatch, event, label=f"fanout:{event.type}")


_fanout = None


def get_fanout():
    global _fanout
    if _fanout is None:
        _fanout = NotificationFanout()
    return _fanout


class NotificationService:
    """
    Inbox and device operations for the current user.
    """

    @classmethod
    def list_for_user(cls, user, unread_only=False, notification_type=None):
        """Newest first."""
        queryset = Notification.objects.for_user(user)
        if unread_only:
            queryset = queryset.unread()
        if notification_type:
            if notification_type not in dict(NotificationType.CHOICES):
                raise ValidationError(f"Unknown notification type '{notification_type}'.")
            queryset = queryset.filter(notification_type=notification_type)
        return queryset.order_by('-created_at')

    @classmethod
    def get_unread_count(cls, user):
        """Get count of unread notifications for a user."""
        return Notification.objects.for_user(user).unread().count()

    @classmethod
    def mark_read(cls, user, notification_id):
        """Mark one of the user's notifications as read."""
        try:
            notification = Notification.objects.get(pk=notification_id, recipient=user)
        except (Notification.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFound('Notification not found.')

        notification.mark_as_read()
        return notification

    @classmethod
    def mark_all_read(cls, user):
        """Mark all notifications as read for a user."""
        return Notification.objects.for_user(user).unread().update(
            is_read=True,
            read_at=timezone.now(),
        )

    @classmethod
    def register_device(cls, user, token, platform):
        """
        Register a push token for ``user``.

        A token already known (possibly under another user) is moved to
        ``user`` with the new platform.
        """
        token = (token or '').strip()
        if not token:
            raise ValidationError('Device token is required.')
        if platform not in dict(DevicePlatform.CHOICES):
            raise ValidationError(f"Unknown platform '{platform}'.")

        device, created = DeviceToken.objects.update_or_create(
            token=token,
            defaults={'user': user, 'platform': platform},
        )
        logger.info(f"[Devices] {'Registered' if created else 'Updated'} {platform} token for user {user.id}")
        return device

    @classmethod
    def unregister_device(cls, user, token):
        deleted, _ = DeviceToken.objects.filter(user=user, token=token).delete()
        return deleted

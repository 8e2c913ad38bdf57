"""
Notification delivery channels.

Each channel delivers one LifecycleEvent to its recipients through one
medium:
- InboxChannel: persisted Notification rows (durable record)
- PushChannel: Expo push messages to registered devices
- LiveStreamChannel: open server-sent-events sessions in this process

Channels may raise; the fan-out wraps every call in its own failure
boundary so one channel never affects another.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests
from django.conf import settings

from core.exceptions import DependencyFailure
from .models import DeviceToken, Notification
from .stream import get_broker

logger = logging.getLogger('cira.notifications')


@dataclass(frozen=True)
class DeliveryResult:
    channel: str
    delivered: int = 0
    failed: int = 0
    error: Optional[str] = None

    @property
    def ok(self):
        return self.error is None

    def as_dict(self):
        return {
            'channel': self.channel,
            'delivered': self.delivered,
            'failed': self.failed,
            'error': self.error,
        }


class NotificationChannel:
    """
    Base class for delivery channels.

    deferred channels run on a Celery worker; the others run in the
    committing process right after commit, before anything is enqueued.
    """

    name = None
    deferred = True

    def deliver(self, event):
        raise NotImplementedError


class InboxChannel(NotificationChannel):
    """
    One unread Notification row per recipient.

    Written in-process on commit so the durable record never depends on
    the broker being reachable.
    """

    name = 'inbox'
    deferred = False

    def deliver(self, event):
        notifications = [
            Notification(
                recipient_id=recipient_id,
                notification_type=event.type,
                title=event.title,
                body=event.body,
                data=event.data,
            )
            for recipient_id in event.recipient_ids
        ]
        if notifications:
            Notification.objects.bulk_create(notifications)
        return DeliveryResult(channel=self.name, delivered=len(notifications))


class PushChannel(NotificationChannel):
    """
    Expo push messages to every device token of every recipient.
    """

    name = 'push'
    deferred = True

    def __init__(self, api_url=None, timeout=None, enabled=None):
        self._api_url = api_url
        self._timeout = timeout
        self._enabled = enabled

    @property
    def api_url(self):
        return self._api_url or settings.EXPO_PUSH_API_URL

    @property
    def timeout(self):
        return self._timeout or settings.PUSH_TIMEOUT_SECONDS

    @property
    def enabled(self):
        return settings.PUSH_ENABLED if self._enabled is None else self._enabled

    def build_messages(self, event, tokens):
        return [
            {
                'to': token,
                'sound': 'default',
                'title': event.push_title or event.title,
                'body': event.push_body or event.body,
                'data': dict(event.data, type=event.type),
                'badge': 1,
            }
            for token in tokens
        ]

    def deliver(self, event):
        if not self.enabled:
            return DeliveryResult(channel=self.name)

        tokens = list(
            DeviceToken.objects
            .filter(user_id__in=event.recipient_ids)
            .values_list('token', flat=True)
        )
        if not tokens:
            return DeliveryResult(channel=self.name)

        try:
            response = requests.post(
                self.api_url,
                json=self.build_messages(event, tokens),
                headers={
                    'Accept': 'application/json',
                    'Accept-Encoding': 'gzip, deflate',
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.Timeout:
            raise DependencyFailure(f"Push API timed out after {self.timeout}s")
        except requests.RequestException as e:
            raise DependencyFailure(f"Push API request failed: {e}")
        except ValueError:
            raise DependencyFailure("Push API returned invalid JSON")

        # Expo wraps per-message tickets in {"data": [...]}
        tickets = body.get('data', []) if isinstance(body, dict) else body
        if not isinstance(tickets, list):
            tickets = [tickets]

        sent = sum(1 for ticket in tickets if ticket.get('status') == 'ok')
        failed = sum(1 for ticket in tickets if ticket.get('status') == 'error')

        if failed:
            logger.warning(f"[Push] {failed} of {len(tokens)} messages rejected for '{event.type}'")

        return DeliveryResult(channel=self.name, delivered=sent, failed=failed)


class LiveStreamChannel(NotificationChannel):
    """Pushes the event into open live stream sessions."""

    name = 'live'
    deferred = False

    def __init__(self, broker=None):
        self._broker = broker

    @property
    def broker(self):
        return self._broker or get_broker()

    def deliver(self, event):
        message = event.message()
        delivered = 0
        for recipient_id in event.recipient_ids:
            delivered += self.broker.broadcast(recipient_id, message)
        return DeliveryResult(channel=self.name, delivered=delivered)


def default_channels():
    return [InboxChannel(), PushChannel(), LiveStreamChannel()]

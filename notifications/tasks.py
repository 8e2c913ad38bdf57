"""
Celery tasks for notification delivery.

One task per (event, deferred channel). Push is best-effort: a failed
delivery is logged and reported in the task result, never retried.
"""

from celery import shared_task

from .events import LifecycleEvent


@shared_task(ignore_result=True)
def deliver_via_channel(channel_name, payload):
    """Deliver one serialized LifecycleEvent through one channel."""
    from .services import get_fanout

    fanout = get_fanout()
    channel = fanout.get_channel(channel_name)
    event = LifecycleEvent.from_payload(payload)

    return fanout.run_channel(channel, event).as_dict()

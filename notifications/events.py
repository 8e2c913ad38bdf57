"""
Lifecycle events handed to the notification fan-out.

An event is built once per committed mutation and carries its recipient
list. It must survive a trip through the Celery broker, so everything in
it is JSON-safe.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class LifecycleEvent:
    type: str
    title: str
    body: str
    data: dict = field(default_factory=dict)
    recipient_ids: List[str] = field(default_factory=list)

    # Shorter copy for lock-screen push messages
    push_title: str = ''
    push_body: str = ''

    def __post_init__(self):
        object.__setattr__(self, 'recipient_ids', [str(pk) for pk in self.recipient_ids])

    @property
    def has_recipients(self):
        return bool(self.recipient_ids)

    def message(self):
        """Frame body sent to live stream sessions."""
        return {
            'type': 'notification',
            'data': {
                'type': self.type,
                'title': self.title,
                'body': self.body,
                'data': self.data,
            },
        }

    def to_payload(self):
        return {
            'type': self.type,
            'title': self.title,
            'body': self.body,
            'data': self.data,
            'recipient_ids': list(self.recipient_ids),
            'push_title': self.push_title,
            'push_body': self.push_body,
        }

    @classmethod
    def from_payload(cls, payload):
        return cls(
            type=payload['type'],
            title=payload['title'],
            body=payload['body'],
            data=payload.get('data') or {},
            recipient_ids=payload.get('recipient_ids') or [],
            push_title=payload.get('push_title', ''),
            push_body=payload.get('push_body', ''),
        )


def dedupe_recipients(candidates, exclude=None):
    """
    Drop empty entries, duplicates and the excluded user, keeping first-seen order.
    """
    excluded = str(exclude) if exclude is not None else None
    seen = []
    for candidate in candidates:
        if candidate is None:
            continue
        candidate = str(candidate)
        if candidate == excluded or candidate in seen:
            continue
        seen.append(candidate)
    return seen

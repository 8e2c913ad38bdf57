"""
Post-commit side-effect scheduling.

Side effects (notifications, audit entries) must only run once the primary
mutation has committed, and must never fail it. Callbacks registered here
are dropped automatically if the surrounding transaction rolls back, so a
failed or retried request cannot fire them twice.
"""

import logging

from django.db import transaction

logger = logging.getLogger('cira.lifecycle')


def run_on_commit(func, *args, label=None, **kwargs):
    """
    Call ``func(*args, **kwargs)`` after the current transaction commits.

    Outside a transaction the callback runs immediately. Any exception is
    logged and swallowed.
    """
    name = label or getattr(func, '__name__', repr(func))

    def _callback():
        try:
            func(*args, **kwargs)
        except Exception:
            logger.error(f"[on_commit] Side effect '{name}' failed", exc_info=True)

    transaction.on_commit(_callback)


def enqueue_on_commit(task, *args, **kwargs):
    """
    Enqueue a Celery task after the current transaction commits.

    Broker outages are logged, never propagated to the request.
    """
    run_on_commit(task.delay, *args, label=task.name, **kwargs)

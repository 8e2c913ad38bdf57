"""
In-process registry of open live notification streams.

Each open server-sent-events connection registers a LiveSession with the
broker. Broadcasting drops a message into every session queue of a user.
Queues are bounded; a full queue loses the message (the inbox still has it).

The broker only sees connections served by this process. Events committed
elsewhere (another gunicorn worker, a Celery worker, the auto_assign_reports
command) never reach streams held here; clients recover them from the inbox.
"""

import json
import logging
import queue
import threading
from collections import defaultdict

from django.conf import settings

logger = logging.getLogger('cira.notifications')


class LiveSession:
    """One open stream connection."""

    def __init__(self, user_id, maxsize):
        self.user_id = str(user_id)
        self._queue = queue.Queue(maxsize=maxsize)

    def offer(self, message):
        try:
            self._queue.put_nowait(message)
        except queue.Full:
            return False
        return True

    def next_message(self, timeout):
        """Block up to ``timeout`` seconds; None when nothing arrived."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None


class LiveStreamBroker:
    """
    Maps user ids to their open sessions.
    """

    def __init__(self, queue_size=100):
        self.queue_size = queue_size
        self._sessions = defaultdict(set)
        self._lock = threading.Lock()

    def register(self, user_id):
        session = LiveSession(user_id, self.queue_size)
        with self._lock:
            self._sessions[session.user_id].add(session)
        logger.debug(f"[LiveStream] Session opened for user {session.user_id}")
        return session

    def unregister(self, session):
        with self._lock:
            sessions = self._sessions.get(session.user_id)
            if sessions is None:
                return
            sessions.discard(session)
            if not sessions:
                del self._sessions[session.user_id]
        logger.debug(f"[LiveStream] Session closed for user {session.user_id}")

    def broadcast(self, user_id, message):
        """
        Queue ``message`` on every open session of ``user_id``.

        Returns the number of sessions that accepted it. Never blocks.
        """
        with self._lock:
            sessions = list(self._sessions.get(str(user_id), ()))

        accepted = 0
        for session in sessions:
            if session.offer(message):
                accepted += 1
            else:
                logger.warning(f"[LiveStream] Queue full for user {user_id}, message dropped")
        return accepted

    def session_count(self, user_id=None):
        with self._lock:
            if user_id is not None:
                return len(self._sessions.get(str(user_id), ()))
            return sum(len(sessions) for sessions in self._sessions.values())


_broker = None
_broker_lock = threading.Lock()


def get_broker():
    global _broker
    if _broker is None:
        with _broker_lock:
            if _broker is None:
                _broker = LiveStreamBroker(queue_size=settings.LIVE_STREAM_QUEUE_SIZE)
    return _broker


def format_event(message):
    return f"data: {json.dumps(message)}\n\n"


def stream_events(broker, user_id, heartbeat_seconds):
    """
    Generator feeding a StreamingHttpResponse.

    The session is registered on first iteration and unregistered when the
    client disconnects and the server closes the generator.
    """
    session = broker.register(user_id)
    try:
        yield format_event({'type': 'connected'})
        while True:
            message = session.next_message(timeout=heartbeat_seconds)
            if message is None:
                yield ': heartbeat\n\n'
            else:
                yield format_event(message)
    finally:
        broker.unregister(session)

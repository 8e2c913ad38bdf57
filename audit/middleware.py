"""
Request logging middleware for the CIRA backend.

Writes one line per API request to the ``cira.audit`` logger. Lifecycle
actions themselves are recorded as AuditLog rows by the AuditRecorder.
"""

import logging
import time

from core.exceptions import get_client_ip

audit_logger = logging.getLogger('cira.audit')


class AuditLoggingMiddleware:
    """
    Logs method, route, caller and outcome of every /api/ request.

    The live notification stream is logged when it opens; its duration
    is the time to first byte, not the lifetime of the connection.
    """

    api_prefix = '/api/'

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        started = time.monotonic()
        response = self.get_response(request)

        if request.path.startswith(self.api_prefix):
            self._log_request(request, response, time.monotonic() - started)

        return response

    def _level_for(self, status_code):
        if status_code >= 500:
            return logging.ERROR
        if status_code >= 400:
            return logging.WARNING
        return logging.INFO

    def _log_request(self, request, response, elapsed):
        # DRF copies the authenticated user onto the Django request
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated:
            caller = f"{user.id}:{user.role}"
        else:
            caller = 'anonymous'

        match = getattr(request, 'resolver_match', None)
        route = match.view_name if match else request.path

        audit_logger.log(
            self._level_for(response.status_code),
            f"{request.method} {route} status={response.status_code} "
            f"caller={caller} ip={get_client_ip(request)} "
            f"elapsed_ms={elapsed * 1000:.1f}",
        )

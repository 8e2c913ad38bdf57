"""
Custom exception handling for the CIRA backend.

Provides the lifecycle error taxonomy and a consistent error response
format. Never exposes internal details in error responses.

Taxonomy:
- NotFound: referenced report/officer/organization does not exist
- ValidationError: malformed or insufficient input
- ConflictError: request conflicts with in-flight work (batch lease held)
- DependencyFailure: notification/audit channel failure (never surfaced)
- StoreFailure: primary transaction failed; safe for the caller to retry
"""

import logging
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status

# Security logger for tracking suspicious activities
security_logger = logging.getLogger('cira.security')


class LifecycleError(Exception):
    """Base exception class for report lifecycle errors."""

    default_code = 'ERROR'
    default_message = 'An error occurred.'
    default_status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message=None, code=None, status_code=None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status_code
        super().__init__(self.message)


class NotFound(LifecycleError):
    """Raised when a referenced report, officer or organization is missing."""
    default_code = 'NOT_FOUND'
    default_message = 'The requested resource was not found.'
    default_status_code = status.HTTP_404_NOT_FOUND


class ValidationError(LifecycleError):
    """Raised when input is malformed or insufficient."""
    default_code = 'VALIDATION_ERROR'
    default_message = 'Invalid request data.'
    default_status_code = status.HTTP_400_BAD_REQUEST


class InvalidStatus(ValidationError):
    """Raised when a target status is empty or not a known report status."""
    default_code = 'INVALID_STATUS'
    default_message = 'Unknown report status.'


class ConflictError(LifecycleError):
    """Raised when the request conflicts with work already in progress."""
    default_code = 'CONFLICT'
    default_message = 'Request conflicts with current state.'
    default_status_code = status.HTTP_409_CONFLICT


class DependencyFailure(LifecycleError):
    """
    Raised inside a notification or audit channel.

    Always caught at the channel boundary; never reaches an HTTP caller.
    """
    default_code = 'DEPENDENCY_FAILURE'
    default_message = 'A downstream delivery channel failed.'
    default_status_code = status.HTTP_502_BAD_GATEWAY


class StoreFailure(LifecycleError):
    """Raised when the primary transaction could not be committed."""
    default_code = 'STORE_FAILURE'
    default_message = 'An internal error occurred. Please try again later.'
    default_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# HTTP status -> (error code, message safe to show a client)
DRF_ERRORS = {
    400: ('BAD_REQUEST', 'Invalid request. Please check your input.'),
    401: ('UNAUTHORIZED', 'Authentication required.'),
    403: ('FORBIDDEN', 'You do not have permission to perform this action.'),
    404: ('NOT_FOUND', 'The requested resource was not found.'),
    405: ('METHOD_NOT_ALLOWED', 'This method is not allowed.'),
    406: ('NOT_ACCEPTABLE', 'Requested response format is not available.'),
    409: ('CONFLICT', 'Request conflicts with current state.'),
    429: ('RATE_LIMIT_EXCEEDED', 'Too many requests. Please try again later.'),
    500: ('INTERNAL_ERROR', 'An internal error occurred. Please try again later.'),
}

SECURITY_STATUSES = (401, 403, 429)


def _envelope(code, message):
    return {
        'success': False,
        'error': {
            'code': code,
            'message': message,
        }
    }


def custom_exception_handler(exc, context):
    """
    DRF exception handler rendering every error as

        {"success": false, "error": {"code": "...", "message": "..."}}

    Lifecycle errors keep their own code and message. DRF errors get a
    generic message per status, except 400 which names the first invalid
    field. 401/403/429 are logged on the security logger.
    """
    if isinstance(exc, LifecycleError):
        return Response(_envelope(exc.code, exc.message), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    code, message = DRF_ERRORS.get(response.status_code, ('UNKNOWN_ERROR', 'An error occurred.'))
    if response.status_code == 400:
        message = _first_validation_message(exc) or message

    if response.status_code in SECURITY_STATUSES:
        _log_security_event(exc, context.get('request'), context.get('view'), response.status_code)

    response.data = _envelope(code, message)
    return response


def _first_validation_message(exc):
    detail = getattr(exc, 'detail', None)
    if isinstance(detail, dict):
        for field, errors in detail.items():
            if isinstance(errors, list) and errors:
                return f"Validation error: {field} - {errors[0]}"
    elif isinstance(detail, list) and detail:
        return str(detail[0])
    elif isinstance(detail, str):
        return detail
    return None


def _log_security_event(exc, request, view, status_code):
    user = getattr(request, 'user', None)
    user_info = str(user.id) if user is not None and user.is_authenticated else 'anonymous'

    security_logger.warning(
        f"Security event: status={status_code}, user={user_info}, "
        f"ip={get_client_ip(request)}, view={view.__class__.__name__ if view else 'unknown'}, "
        f"exception={exc.__class__.__name__}"
    )


def get_client_ip(request):
    """First address in X-Forwarded-For, else REMOTE_ADDR."""
    if not request:
        return 'unknown'

    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', 'unknown')

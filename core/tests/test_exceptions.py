from django.test import RequestFactory, SimpleTestCase
from rest_framework import exceptions as drf_exceptions

from core.exceptions import (
    ConflictError,
    InvalidStatus,
    NotFound,
    StoreFailure,
    custom_exception_handler,
    get_client_ip,
)


class CustomExceptionHandlerTests(SimpleTestCase):

    def test_lifecycle_errors_keep_code_and_message(self):
        cases = [
            (NotFound('Report 1 not found.'), 404, 'NOT_FOUND', 'Report 1 not found.'),
            (InvalidStatus(), 400, 'INVALID_STATUS', 'Unknown report status.'),
            (ConflictError('Busy'), 409, 'CONFLICT', 'Busy'),
            (StoreFailure(), 500, 'STORE_FAILURE', 'An internal error occurred. Please try again later.'),
        ]
        for exc, status_code, code, message in cases:
            response = custom_exception_handler(exc, {})
            self.assertEqual(response.status_code, status_code)
            self.assertEqual(response.data, {
                'success': False,
                'error': {'code': code, 'message': message},
            })

    def test_drf_validation_error_names_field(self):
        exc = drf_exceptions.ValidationError({'title': ['This field is required.']})

        response = custom_exception_handler(exc, {})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error']['code'], 'BAD_REQUEST')
        self.assertEqual(
            response.data['error']['message'],
            'Validation error: title - This field is required.',
        )

    def test_permission_denied_is_generic(self):
        response = custom_exception_handler(drf_exceptions.PermissionDenied('secret detail'), {})

        self.assertEqual(response.status_code, 403)
        self.assertEqual(
            response.data['error']['message'],
            'You do not have permission to perform this action.',
        )

    def test_unknown_exceptions_are_not_handled(self):
        self.assertIsNone(custom_exception_handler(RuntimeError('boom'), {}))


class ClientIpTests(SimpleTestCase):

    def test_forwarded_for_wins(self):
        request = RequestFactory().get('/', HTTP_X_FORWARDED_FOR='10.0.0.1, 172.16.0.1')
        self.assertEqual(get_client_ip(request), '10.0.0.1')

    def test_remote_addr_fallback(self):
        request = RequestFactory().get('/', REMOTE_ADDR='192.168.1.5')
        self.assertEqual(get_client_ip(request), '192.168.1.5')

    def test_no_request(self):
        self.assertEqual(get_client_ip(None), 'unknown')

"""
JWT authentication backends for CIRA.

Tokens are issued elsewhere and verified here with the shared signing key.

QueryTokenJWTAuthentication additionally accepts ``?token=<jwt>`` so that
browser EventSource clients, which cannot set headers, can open the live
notification stream.
"""

import logging
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError

security_logger = logging.getLogger('cira.security')


class ActiveUserJWTAuthentication(JWTAuthentication):
    """
    Standard bearer-token authentication that rejects inactive accounts.
    """

    def authenticate(self, request):
        result = super().authenticate(request)
        if result is None:
            return None

        user, validated_token = result
        if not user.is_active:
            security_logger.warning(f"Inactive user attempted access: {user.id}")
            raise InvalidToken({
                'detail': 'Your account is not active.',
                'code': 'account_inactive'
            })
        return (user, validated_token)


class QueryTokenJWTAuthentication(ActiveUserJWTAuthentication):
    """
    Bearer-token authentication with a query-string fallback.

    The Authorization header wins when present.
    """

    query_param = 'token'

    def authenticate(self, request):
        header = self.get_header(request)
        if header is not None:
            return super().authenticate(request)

        raw_token = request.query_params.get(self.query_param) if hasattr(request, 'query_params') else None
        if not raw_token:
            return None

        try:
            validated_token = self.get_validated_token(raw_token.encode())
        except (InvalidToken, TokenError):
            security_logger.warning("Invalid stream token presented")
            raise

        user = self.get_user(validated_token)
        if not user.is_active:
            raise InvalidToken({
                'detail': 'Your account is not active.',
                'code': 'account_inactive'
            })
        return (user, validated_token)

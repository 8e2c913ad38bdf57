from django.test import TestCase
from rest_framework.test import APIRequestFactory
from rest_framework.request import Request
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken
from rest_framework_simplejwt.tokens import AccessToken

from authentication.backends import ActiveUserJWTAuthentication, QueryTokenJWTAuthentication
from authentication.models import User, UserRole
from authentication.permissions import IsAdmin, IsAuthenticated, IsOfficerOrAdmin
from reports.tests.helpers import make_admin, make_citizen, make_officer


class UserModelTests(TestCase):

    def test_display_name_falls_back(self):
        self.assertEqual(make_citizen(full_name='Ada').display_name, 'Ada')
        self.assertEqual(User.objects.create_user('bob@example.com', full_name='').display_name, 'bob@example.com')
        self.assertEqual(User.objects.create_user('kiosk-7', full_name='').display_name, 'kiosk-7')

    def test_roles(self):
        self.assertTrue(make_officer().is_officer)
        self.assertTrue(make_admin().is_admin)
        superuser = User.objects.create_superuser('root@example.com', 'pw')
        self.assertEqual(superuser.role, UserRole.ADMIN)
        self.assertTrue(superuser.is_staff)


class PermissionTests(TestCase):

    def setUp(self):
        self.factory = APIRequestFactory()

    def request_for(self, user):
        request = self.factory.get('/')
        request.user = user
        return request

    def test_matrix(self):
        citizen = make_citizen()
        officer = make_officer()
        admin = make_admin()
        inactive_admin = make_admin('gone@example.com', is_active=False)

        expectations = [
            (IsAuthenticated, citizen, True),
            (IsAuthenticated, inactive_admin, False),
            (IsOfficerOrAdmin, citizen, False),
            (IsOfficerOrAdmin, officer, True),
            (IsOfficerOrAdmin, admin, True),
            (IsAdmin, officer, False),
            (IsAdmin, admin, True),
            (IsAdmin, inactive_admin, False),
        ]
        for permission_class, user, allowed in expectations:
            with self.subTest(permission=permission_class.__name__, user=user.identifier):
                self.assertEqual(
                    permission_class().has_permission(self.request_for(user), None),
                    allowed,
                )


class JWTBackendTests(TestCase):

    def setUp(self):
        self.factory = APIRequestFactory()
        self.user = make_citizen()
        self.token = str(AccessToken.for_user(self.user))

    def test_bearer_header(self):
        request = Request(self.factory.get('/', HTTP_AUTHORIZATION=f'Bearer {self.token}'))

        user, _ = ActiveUserJWTAuthentication().authenticate(request)

        self.assertEqual(user, self.user)

    def test_query_token(self):
        request = Request(self.factory.get('/', {'token': self.token}))

        user, _ = QueryTokenJWTAuthentication().authenticate(request)

        self.assertEqual(user, self.user)

    def test_query_token_ignored_by_header_backend(self):
        request = Request(self.factory.get('/', {'token': self.token}))

        self.assertIsNone(ActiveUserJWTAuthentication().authenticate(request))

    def test_invalid_query_token(self):
        request = Request(self.factory.get('/', {'token': 'not-a-jwt'}))

        with self.assertRaises(InvalidToken):
            QueryTokenJWTAuthentication().authenticate(request)

    def test_inactive_user_rejected(self):
        User.objects.filter(pk=self.user.pk).update(is_active=False)
        request = Request(self.factory.get('/', {'token': self.token}))

        with self.assertRaises(AuthenticationFailed):
            QueryTokenJWTAuthentication().authenticate(request)

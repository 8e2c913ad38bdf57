from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from audit.models import AuditAction, AuditLog, ResourceType
from audit.services import AuditRecorder
from audit.tasks import record_audit_event
from reports.tests.helpers import make_admin, make_officer


class AuditRecorderTests(TestCase):

    def test_records_entry(self):
        entry = AuditRecorder.record(
            AuditAction.REPORT_STATUS_CHANGED,
            ResourceType.REPORT,
            user_id='u1',
            resource_id='r1',
            details={'from_status': 'new', 'to_status': 'triaged'},
        )

        self.assertIsNotNone(entry)
        stored = AuditLog.objects.get(pk=entry.pk)
        self.assertEqual(stored.user_id, 'u1')
        self.assertEqual(stored.details['to_status'], 'triaged')

    def test_storage_failure_is_swallowed(self):
        with mock.patch.object(AuditLog.objects, 'create', side_effect=DatabaseError('locked')):
            with self.assertLogs('cira.audit', level='ERROR'):
                entry = AuditRecorder.record(AuditAction.REPORT_CREATED, ResourceType.REPORT)

        self.assertIsNone(entry)
        self.assertFalse(AuditLog.objects.exists())

    def test_task_returns_entry_id(self):
        entry_id = record_audit_event.apply(
            args=(AuditAction.REPORT_COMMENT_ADDED, ResourceType.COMMENT),
            kwargs={'resource_id': 'c1'},
        ).get()

        self.assertEqual(str(AuditLog.objects.get().id), entry_id)

    def test_entries_are_append_only(self):
        entry = AuditRecorder.record(AuditAction.REPORT_CREATED, ResourceType.REPORT)

        with self.assertRaises(PermissionError):
            entry.save()
        with self.assertRaises(PermissionError):
            entry.delete()
        with self.assertRaises(PermissionError):
            AuditLog.objects.update(action=AuditAction.REPORT_ASSIGNED)


class AuditLogApiTests(APITestCase):

    def setUp(self):
        self.admin = make_admin()
        self.created = AuditRecorder.record(
            AuditAction.REPORT_CREATED, ResourceType.REPORT, resource_id='r1'
        )
        AuditRecorder.record(AuditAction.REPORT_ASSIGNED, ResourceType.ASSIGNMENT, resource_id='a1')

    def client_for(self, user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def test_admin_lists_and_filters(self):
        client = self.client_for(self.admin)

        response = client.get(reverse('audit:log-list'))
        self.assertEqual(response.data['count'], 2)

        response = client.get(reverse('audit:log-list'), {'action': AuditAction.REPORT_CREATED})
        self.assertEqual([row['resource_id'] for row in response.data['results']], ['r1'])

    def test_detail(self):
        response = self.client_for(self.admin).get(
            reverse('audit:log-detail', kwargs={'id': self.created.id})
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['action'], AuditAction.REPORT_CREATED)

    def test_officer_forbidden(self):
        response = self.client_for(make_officer()).get(reverse('audit:log-list'))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

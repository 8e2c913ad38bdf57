import uuid

from django.core.cache import cache
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from reports.balancer import AUTO_ASSIGN_LEASE_KEY
from reports.models import Report, ReportAssignment, ReportComment, ReportStatus
from reports.tests.helpers import (
    make_admin, make_citizen, make_officer, make_organization, make_report,
)


class ReportApiTestCase(APITestCase):

    def setUp(self):
        cache.clear()
        self.citizen = make_citizen()
        self.officer = make_officer()
        self.admin = make_admin()
        self.report = make_report(reporter=self.citizen)

    def client_for(self, user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client


class SubmitReportViewTests(ReportApiTestCase):

    def test_citizen_submits_report(self):
        response = self.client_for(self.citizen).post(
            reverse('reports:create'),
            {'title': 'Pothole', 'type': 'pothole', 'severity': 'high', 'latitude': '-1.9441'},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], ReportStatus.NEW)
        self.assertEqual(response.data['reporter_id'], str(self.citizen.id))
        report = Report.objects.get(pk=response.data['id'])
        self.assertEqual(report.status_history.count(), 1)

    def test_anonymous_rejected(self):
        response = APIClient().post(reverse('reports:create'), {'title': 'Pothole'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error']['code'], 'UNAUTHORIZED')

    def test_invalid_payload(self):
        response = self.client_for(self.citizen).post(
            reverse('reports:create'), {'title': 'Pothole', 'type': 'volcano'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['code'], 'BAD_REQUEST')


class StatusViewTests(ReportApiTestCase):

    def url(self, report_id):
        return reverse('reports:status', kwargs={'report_id': report_id})

    def test_officer_changes_status(self):
        response = self.client_for(self.officer).patch(
            self.url(self.report.id), {'status': 'in_progress', 'note': 'On it'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], ReportStatus.IN_PROGRESS)
        self.assertEqual(response.data['from_status'], ReportStatus.NEW)
        self.report.refresh_from_db()
        self.assertEqual(self.report.status, ReportStatus.IN_PROGRESS)

    def test_citizen_forbidden(self):
        response = self.client_for(self.citizen).patch(
            self.url(self.report.id), {'status': 'resolved'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.report.refresh_from_db()
        self.assertEqual(self.report.status, ReportStatus.NEW)

    def test_unknown_status(self):
        response = self.client_for(self.officer).patch(
            self.url(self.report.id), {'status': 'archived'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['code'], 'INVALID_STATUS')

    def test_empty_status(self):
        response = self.client_for(self.officer).patch(
            self.url(self.report.id), {'status': ''}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['code'], 'INVALID_STATUS')

    def test_missing_report(self):
        response = self.client_for(self.admin).patch(
            self.url(uuid.uuid4()), {'status': 'triaged'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['code'], 'NOT_FOUND')


class AssignViewTests(ReportApiTestCase):

    def url(self, report_id):
        return reverse('reports:assign', kwargs={'report_id': report_id})

    def test_admin_assigns(self):
        organization = make_organization()

        response = self.client_for(self.admin).post(
            self.url(self.report.id),
            {'assignee_id': str(self.officer.id), 'organization_id': str(organization.id)},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['assignee']['id'], str(self.officer.id))
        self.assertEqual(response.data['organization']['name'], 'City Works')
        self.assertEqual(response.data['status'], ReportStatus.ASSIGNED)

    def test_empty_body_rejected(self):
        response = self.client_for(self.admin).post(self.url(self.report.id), {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['code'], 'VALIDATION_ERROR')
        self.assertFalse(ReportAssignment.objects.exists())

    def test_officer_forbidden(self):
        response = self.client_for(self.officer).post(
            self.url(self.report.id), {'assignee_id': str(self.officer.id)}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_officer(self):
        response = self.client_for(self.admin).post(
            self.url(self.report.id), {'assignee_id': str(uuid.uuid4())}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class AutoAssignViewTests(ReportApiTestCase):

    def test_admin_runs_batch(self):
        response = self.client_for(self.admin).post(reverse('reports:auto-assign'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['assigned'], 1)
        self.assertEqual(response.data['officer_count'], 1)
        self.assertEqual(response.data['data'][0]['report_id'], str(self.report.id))

    def test_conflict_while_running(self):
        cache.add(AUTO_ASSIGN_LEASE_KEY, 'other-run', timeout=60)

        response = self.client_for(self.admin).post(reverse('reports:auto-assign'))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['code'], 'CONFLICT')


class CommentAndHistoryViewTests(ReportApiTestCase):

    def test_add_comment(self):
        response = self.client_for(self.citizen).post(
            reverse('reports:comments', kwargs={'report_id': self.report.id}),
            {'body': 'Still there'},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['author_name'], 'Test Citizen')
        self.assertEqual(ReportComment.objects.filter(report=self.report).count(), 1)

    def test_history_newest_first(self):
        officer_client = self.client_for(self.officer)
        status_url = reverse('reports:status', kwargs={'report_id': self.report.id})
        officer_client.patch(status_url, {'status': 'triaged'}, format='json')
        officer_client.patch(status_url, {'status': 'in_progress'}, format='json')

        response = self.client_for(self.citizen).get(
            reverse('reports:history', kwargs={'report_id': self.report.id})
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [entry['to_status'] for entry in response.data['data']],
            ['in_progress', 'triaged'],
        )
        self.assertEqual(response.data['data'][0]['changed_by_name'], 'Test Officer')


class OfficerMetricsViewTests(ReportApiTestCase):

    def test_admin_only(self):
        self.assertEqual(
            self.client_for(self.officer).get(reverse('reports:officer-metrics')).status_code,
            status.HTTP_403_FORBIDDEN,
        )

        response = self.client_for(self.admin).get(reverse('reports:officer-metrics'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'][0]['officer_id'], str(self.officer.id))


class ConfirmationViewTests(ReportApiTestCase):

    def test_confirm_once(self):
        url = reverse('reports:confirm', kwargs={'report_id': self.report.id})
        client = self.client_for(self.citizen)

        first = client.post(url, format='json')
        second = client.post(url, format='json')

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(first.data['report_id'], str(self.report.id))
        self.assertEqual(first.data['user_id'], str(self.citizen.id))
        self.assertEqual(first.data['confirmation_count'], 1)
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(second.data['success'])
        self.assertEqual(second.data['error']['code'], 'ALREADY_CONFIRMED')

    def test_confirmation_count(self):
        self.client_for(self.officer).post(
            reverse('reports:confirm', kwargs={'report_id': self.report.id}), format='json'
        )

        response = self.client_for(self.citizen).get(
            reverse('reports:confirmations', kwargs={'report_id': self.report.id})
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertFalse(response.data['user_confirmed'])

    def test_missing_report(self):
        response = self.client_for(self.citizen).post(
            reverse('reports:confirm', kwargs={'report_id': uuid.uuid4()}), format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error']['code'], 'NOT_FOUND')

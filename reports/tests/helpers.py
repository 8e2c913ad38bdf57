"""
Shared fixtures for lifecycle tests.
"""

from datetime import timedelta

from django.utils import timezone

from authentication.models import User, UserRole
from reports.models import Organization, Report, ReportStatus


def make_citizen(identifier='citizen@example.com', **extra):
    return User.objects.create_user(identifier, full_name=extra.pop('full_name', 'Test Citizen'), **extra)


def make_officer(identifier='officer@example.com', **extra):
    return User.objects.create_officer(identifier, full_name=extra.pop('full_name', 'Test Officer'), **extra)


def make_admin(identifier='admin@example.com', **extra):
    extra['role'] = UserRole.ADMIN
    return User.objects.create_user(identifier, full_name=extra.pop('full_name', 'Test Admin'), **extra)


def make_organization(name='City Works'):
    return Organization.objects.create(name=name)


def make_report(reporter=None, title='Pothole on Main St', status=ReportStatus.NEW, age_minutes=None):
    """
    Create a report directly, without history rows.

    age_minutes backdates created_at so backlog ordering is explicit.
    """
    report = Report.objects.create(title=title, reporter=reporter, status=status)
    if age_minutes is not None:
        created_at = timezone.now() - timedelta(minutes=age_minutes)
        Report.objects.filter(pk=report.pk).update(created_at=created_at)
        report.refresh_from_db()
    return report

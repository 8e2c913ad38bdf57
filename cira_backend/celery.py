"""
Celery application for the CIRA backend.

Workers deliver deferred notification channels and write audit entries.

Usage:
    celery -A cira_backend worker -l info
"""

import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'cira_backend.settings')

app = Celery('cira_backend')

# All celery settings live in Django settings under the CELERY_ prefix
app.config_from_object('django.conf:settings', namespace='CELERY')

app.autodiscover_tasks()

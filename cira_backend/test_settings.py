"""
Settings for the test suite.

Supplies the secrets the main settings require, runs Celery tasks inline
and keeps everything in memory.
"""

import os

os.environ.setdefault('SECRET_KEY', 'test-secret-key-not-for-production')
os.environ.setdefault('DEBUG', 'False')
os.environ.setdefault('SECURE_SSL_REDIRECT', 'False')

from .settings import *  # noqa: E402,F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'cira-tests',
    }
}

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    'DEFAULT_THROTTLE_CLASSES': [],
    'TEST_REQUEST_DEFAULT_FORMAT': 'json',
}

PUSH_ENABLED = True
EXPO_PUSH_API_URL = 'https://push.test/--/api/v2/push/send'
LIVE_STREAM_HEARTBEAT_SECONDS = 1

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

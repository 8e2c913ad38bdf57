"""
WSGI config for the CIRA backend.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'cira_backend.settings')

application = get_wsgi_application()

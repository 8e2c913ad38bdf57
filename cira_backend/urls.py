"""
URL configuration for the CIRA backend.

API Structure:
- /api/v1/reports/       - Report lifecycle (submit, status, assign, comments, confirmations)
- /api/v1/notifications/ - Inbox, devices and live stream
- /api/v1/audit/         - Audit logs (administrators only)
- /admin/                - Django admin (restricted)
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse


def health_check(request):
    """Health check endpoint for load balancers."""
    return JsonResponse({
        'status': 'healthy',
        'service': 'cira-backend'
    })


def api_root(request):
    """API root endpoint with version info."""
    return JsonResponse({
        'name': 'CIRA API',
        'version': 'v1',
        'endpoints': {
            'reports': '/api/v1/reports/',
            'notifications': '/api/v1/notifications/',
            'audit': '/api/v1/audit/',
        }
    })


urlpatterns = [
    # Health check (public)
    path('health/', health_check, name='health-check'),

    # API root
    path('api/v1/', api_root, name='api-root'),

    # Report endpoints
    path('api/v1/reports/', include('reports.urls', namespace='reports')),

    # Notification endpoints
    path('api/v1/notifications/', include('notifications.urls', namespace='notifications')),

    # Audit endpoints
    path('api/v1/audit/', include('audit.urls', namespace='audit')),

    # Django admin (restricted access)
    path('admin/', admin.site.urls),
]

"""
URL configuration for audit logs.
"""

from django.urls import path

from . import views

app_name = 'audit'

urlpatterns = [
    path('logs/', views.AuditLogListView.as_view(), name='log-list'),
    path('logs/<uuid:id>/', views.AuditLogDetailView.as_view(), name='log-detail'),
]

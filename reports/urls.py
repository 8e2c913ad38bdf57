"""
URL configuration for reports.
"""

from django.urls import path

from . import views

app_name = 'reports'

urlpatterns = [
    path('', views.ReportCreateView.as_view(), name='create'),
    path('auto-assign/', views.AutoAssignView.as_view(), name='auto-assign'),
    path('officers/metrics/', views.OfficerMetricsView.as_view(), name='officer-metrics'),

    # Single report lifecycle
    path('<uuid:report_id>/status/', views.ReportStatusUpdateView.as_view(), name='status'),
    path('<uuid:report_id>/assign/', views.ReportAssignView.as_view(), name='assign'),
    path('<uuid:report_id>/comments/', views.ReportCommentCreateView.as_view(), name='comments'),
    path('<uuid:report_id>/confirm/', views.ReportConfirmView.as_view(), name='confirm'),
    path('<uuid:report_id>/confirmations/', views.ReportConfirmationsView.as_view(), name='confirmations'),
    path('<uuid:report_id>/history/', views.ReportHistoryView.as_view(), name='history'),
]

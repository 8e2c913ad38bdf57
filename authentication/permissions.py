"""
Custom permissions for the CIRA backend.

Implements role-based access control:
- Admin: assignment, auto-assignment, audit visibility
- Officer: status changes on reports, comments
- Citizen: report submission, comments, own notifications

All permissions check that the account is active.
"""

from rest_framework import permissions


class IsAuthenticated(permissions.IsAuthenticated):
    """
    Extended IsAuthenticated that also checks account status.
    """

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        return request.user.is_active


class IsAdmin(permissions.BasePermission):
    """
    Permission for administrators only.

    Administrators can:
    - Assign reports manually
    - Trigger auto-assignment of the backlog
    - Read the audit trail and officer metrics
    """

    message = "This action requires administrator access."

    def has_permission(self, request, view):
        if not request.user.is_authenticated or not request.user.is_active:
            return False
        return request.user.is_admin


class IsOfficerOrAdmin(permissions.BasePermission):
    """
    Permission for staff (officers and administrators).
    """

    message = "This action requires officer access."

    def has_permission(self, request, view):
        if not request.user.is_authenticated or not request.user.is_active:
            return False
        return request.user.is_officer or request.user.is_admin

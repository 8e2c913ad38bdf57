from celery import shared_task

from .services import AuditRecorder


@shared_task(ignore_result=True)
def record_audit_event(action, resource_type, user_id=None, resource_id=None, details=None):
    entry = AuditRecorder.record(
        action,
        resource_type,
        user_id=user_id,
        resource_id=resource_id,
        details=details,
    )
    return str(entry.id) if entry else None

"""
Core models for the CIRA backend.

Contains abstract base models that provide:
- UUID primary keys (no auto-increment IDs)
- Timestamp tracking
- Append-only enforcement for ledger-style tables
"""

import uuid
from django.db import models


class BaseModel(models.Model):
    """
    Abstract base model providing UUID primary key and timestamps.

    Every CIRA model inherits from this class so that identifiers are
    non-enumerable and creation order is always recorded.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier (UUID v4)"
    )

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when record was created"
    )

    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Timestamp when record was last updated"
    )

    class Meta:
        abstract = True
        ordering = ['-created_at']


class AppendOnlyQuerySet(models.QuerySet):
    """
    QuerySet that refuses bulk modification.

    Rows can be inserted (including bulk_create) and read, never
    updated or deleted.
    """

    def update(self, *args, **kwargs):
        raise PermissionError(f"{self.model.__name__} rows are immutable and cannot be updated.")

    def delete(self, *args, **kwargs):
        raise PermissionError(f"{self.model.__name__} rows are immutable and cannot be deleted.")


class AppendOnlyModel(BaseModel):
    """
    Abstract base for append-only records (status history, audit trail).

    A row may be saved exactly once. Re-saving or deleting raises
    PermissionError.
    """

    objects = AppendOnlyQuerySet.as_manager()

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise PermissionError(f"{self.__class__.__name__} rows are immutable and cannot be updated.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionError(f"{self.__class__.__name__} rows are immutable and cannot be deleted.")

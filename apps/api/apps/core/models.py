"""
Core models: shared sync bookkeeping, clinic
"""
import uuid
from django.db import models
from django.utils import timezone


class SyncRecordQuerySet(models.QuerySet):
    """QuerySet helpers shared by every synchronizable table."""

    def live(self):
        return self.filter(is_deleted=False)

    def deleted(self):
        return self.filter(is_deleted=True)


class SyncRecord(models.Model):
    """
    Abstract base for rows that are synchronized with offline clients.

    Bookkeeping fields:
    - id: UUID PK (v1, time-based, matches ids generated by clients)
    - is_deleted / deleted_at: soft delete
    - created_at / updated_at: client-visible timestamps (may come from the client)
    - last_modified: server time of the last write
    - server_created_at: server time the row first arrived, never rewritten
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid1, editable=False)
    is_deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)
    last_modified = models.DateTimeField(default=timezone.now)
    server_created_at = models.DateTimeField(default=timezone.now, editable=False)
    deleted_at = models.DateTimeField(blank=True, null=True)

    objects = SyncRecordQuerySet.as_manager()

    class Meta:
        abstract = True

    def soft_delete(self, save=True):
        """Flag the row as deleted and stamp every bookkeeping timestamp."""
        now = timezone.now()
        self.is_deleted = True
        self.deleted_at = now
        self.updated_at = now
        self.last_modified = now
        if save:
            self.save(update_fields=['is_deleted', 'deleted_at', 'updated_at', 'last_modified'])

    def touch(self):
        """Bump updated_at/last_modified in memory before a save."""
        now = timezone.now()
        self.updated_at = now
        self.last_modified = now


class Clinic(SyncRecord):
    """
    Clinic sites. Users (providers) belong to a clinic; a clinic with live
    users cannot be soft-deleted.
    """
    name = models.CharField(max_length=255, blank=True, null=True)

    class Meta:
        db_table = 'clinics'
        verbose_name = 'Clinic'
        verbose_name_plural = 'Clinics'
        indexes = [
            models.Index(fields=['is_deleted'], name='idx_clinic_deleted'),
        ]

    def __str__(self):
        return self.name or str(self.id)

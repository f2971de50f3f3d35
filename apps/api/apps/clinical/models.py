"""
Clinical models: patient, visit, appointment.

Every table carries the sync bookkeeping from apps.core.models.SyncRecord.
"""
from django.conf import settings
from django.db import models

from apps.core.models import SyncRecord


# ============================================================================
# Enums
# ============================================================================

class AppointmentStatusChoices(models.TextChoices):
    PENDING = 'pending', 'Pending'
    CONFIRMED = 'confirmed', 'Confirmed'
    CANCELLED = 'cancelled', 'Cancelled'
    COMPLETED = 'completed', 'Completed'
    CHECKED_IN = 'checked_in', 'Checked In'


# ============================================================================
# Models
# ============================================================================

class Patient(SyncRecord):
    """
    Patient demographics.

    - given_name, surname
    - date_of_birth, sex nullable
    - citizenship, phone, government_id, external_patient_id
    - primary_clinic_id: FK -> clinics nullable
    - metadata: free-form JSON object
    """
    given_name = models.CharField(max_length=255, blank=True, default='')
    surname = models.CharField(max_length=255, blank=True, default='')
    date_of_birth = models.DateField(blank=True, null=True)
    sex = models.CharField(max_length=20, blank=True, null=True)
    citizenship = models.CharField(max_length=100, blank=True, default='')
    phone = models.CharField(max_length=50, blank=True, default='')
    government_id = models.CharField(max_length=100, blank=True, default='')
    external_patient_id = models.CharField(max_length=100, blank=True, default='')
    primary_clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='patients'
    )
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'patients'
        verbose_name = 'Patient'
        verbose_name_plural = 'Patients'
        indexes = [
            models.Index(fields=['surname', 'given_name'], name='idx_patient_name'),
            models.Index(fields=['primary_clinic'], name='idx_patient_clinic'),
            models.Index(fields=['is_deleted'], name='idx_patient_deleted'),
        ]

    def __str__(self):
        return f"{self.given_name} {self.surname}".strip() or str(self.id)


class Visit(SyncRecord):
    """
    A patient's visit to a clinic, attended by a provider.

    Created implicitly when an appointment is saved without a visit.
    """
    patient = models.ForeignKey(
        'Patient',
        on_delete=models.PROTECT,
        related_name='visits'
    )
    clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.PROTECT,
        related_name='visits'
    )
    provider = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='visits'
    )
    provider_name = models.CharField(max_length=255, blank=True, default='')
    check_in_timestamp = models.DateTimeField(blank=True, null=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'visits'
        verbose_name = 'Visit'
        verbose_name_plural = 'Visits'
        indexes = [
            models.Index(fields=['patient'], name='idx_visit_patient'),
            models.Index(fields=['clinic'], name='idx_visit_clinic'),
            models.Index(fields=['is_deleted'], name='idx_visit_deleted'),
        ]

    def __str__(self):
        return f"Visit {self.id}"


class Appointment(SyncRecord):
    """
    Scheduled appointment.

    - provider: user expected to see the patient, nullable
    - user: user who booked the appointment
    - current_visit_id: visit the appointment belongs to; may reference a
      visit that has not reached the server yet
    - fulfilled_visit_id: visit in which the appointment was honoured
    - timestamp / duration (minutes)
    """
    provider = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='provider_appointments'
    )
    clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.PROTECT,
        related_name='appointments'
    )
    patient = models.ForeignKey(
        'Patient',
        on_delete=models.PROTECT,
        related_name='appointments'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='booked_appointments'
    )
    current_visit_id = models.UUIDField()
    fulfilled_visit_id = models.UUIDField(blank=True, null=True)
    timestamp = models.DateTimeField()
    duration = models.PositiveIntegerField(default=0)
    reason = models.TextField(blank=True, default='')
    notes = models.TextField(blank=True, default='')
    status = models.CharField(
        max_length=20,
        choices=AppointmentStatusChoices.choices,
        default=AppointmentStatusChoices.PENDING
    )
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'appointments'
        verbose_name = 'Appointment'
        verbose_name_plural = 'Appointments'
        indexes = [
            models.Index(fields=['patient'], name='idx_appointment_patient'),
            models.Index(fields=['provider'], name='idx_appointment_provider'),
            models.Index(fields=['clinic'], name='idx_appointment_clinic'),
            models.Index(fields=['timestamp'], name='idx_appointment_timestamp'),
            models.Index(fields=['status'], name='idx_appointment_status'),
            models.Index(fields=['is_deleted'], name='idx_appointment_deleted'),
        ]

    def __str__(self):
        return f"Appointment {self.id} ({self.status})"

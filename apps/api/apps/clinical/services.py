"""
Appointment services.

Reads exclude soft-deleted rows. ``save`` creates the visit (when the payload
has none) and upserts the appointment inside one transaction.
"""
import logging

from django.db import transaction
from django.utils import timezone

from apps.authz.models import User
from apps.clinical.models import Appointment, AppointmentStatusChoices, Patient, Visit
from apps.core.exceptions import InvalidPayloadError, InvalidStatusError, RecordNotFoundError
from apps.core.models import Clinic
from apps.core.observability import log_domain_event, metrics
from apps.core.utils import is_valid_uuid, new_record_id, safe_json_parse, to_safe_datetime

logger = logging.getLogger(__name__)

ALLOWED_STATUSES = AppointmentStatusChoices.values

# PositiveIntegerField upper bound
MAX_DURATION = 2147483647


def get_all():
    return Appointment.objects.live().order_by('-timestamp')


def get_by_id(appointment_id):
    """Return the live appointment or None."""
    if not is_valid_uuid(appointment_id):
        return None
    return Appointment.objects.live().filter(pk=appointment_id).first()


def get_all_with_details():
    """
    Live appointments with their patient, clinic and provider.

    Appointments without a provider are left out.
    """
    queryset = (
        Appointment.objects.live()
        .filter(provider__isnull=False)
        .select_related('patient', 'clinic', 'provider')
        .order_by('-timestamp')
    )
    return [
        {
            'appointment': appointment,
            'patient': appointment.patient,
            'clinic': appointment.clinic,
            'provider': appointment.provider,
        }
        for appointment in queryset
    ]


def toggle_status(appointment_id, status):
    if status not in ALLOWED_STATUSES:
        raise InvalidStatusError(status, ALLOWED_STATUSES)
    if not is_valid_uuid(appointment_id):
        raise RecordNotFoundError('Appointment', appointment_id)

    now = timezone.now()
    updated = Appointment.objects.live().filter(pk=appointment_id).update(
        status=status,
        updated_at=now,
        last_modified=now,
    )
    if not updated:
        raise RecordNotFoundError('Appointment', appointment_id)

    metrics.appointment_status_changes_total.labels(status=status).inc()
    log_domain_event(
        'appointment_status_changed',
        entity_type='Appointment',
        entity_id=str(appointment_id),
        status=status,
    )
    return get_by_id(appointment_id)


def _required_id(payload, field):
    value = payload.get(field)
    if not is_valid_uuid(value):
        raise InvalidPayloadError(f"'{field}' must be a valid UUID")
    return str(value)


def _optional_id(payload, field):
    value = payload.get(field)
    if value in (None, ''):
        return None
    if not is_valid_uuid(value):
        raise InvalidPayloadError(f"'{field}' must be a valid UUID or null")
    return str(value)


def _ensure_exists(model, record_id, entity):
    if record_id is not None and not model.objects.filter(pk=record_id).exists():
        raise RecordNotFoundError(entity, record_id)


def _duration(payload):
    value = payload.get('duration') or 0
    if isinstance(value, bool):
        raise InvalidPayloadError("'duration' must be a whole number of minutes")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidPayloadError("'duration' must be a whole number of minutes")
    try:
        duration = int(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidPayloadError("'duration' must be a whole number of minutes")
    if duration < 0:
        raise InvalidPayloadError("'duration' must not be negative")
    if duration > MAX_DURATION:
        raise InvalidPayloadError(f"'duration' must not exceed {MAX_DURATION} minutes")
    return duration


def _text(payload, field):
    value = payload.get(field) or ''
    if not isinstance(value, str):
        value = str(value)
    if '\x00' in value:
        raise InvalidPayloadError(f"'{field}' must not contain NUL characters")
    return value


def save(appointment_id, appointment, current_user_name=''):
    """
    Upsert an appointment.

    Args:
        appointment_id: explicit id; falls back to appointment['id'], then a new UUIDv1
        appointment: payload dict (client field names)
        current_user_name: provider_name for the visit created when the
            payload carries no valid current_visit_id

    Returns:
        (Appointment, visit_created)

    Raises:
        InvalidPayloadError, InvalidStatusError, RecordNotFoundError
    """
    record_id = appointment_id or appointment.get('id') or new_record_id()
    if not is_valid_uuid(record_id):
        raise InvalidPayloadError(f"Appointment id '{record_id}' is not a valid UUID")

    patient_id = _required_id(appointment, 'patient_id')
    clinic_id = _required_id(appointment, 'clinic_id')
    provider_id = _optional_id(appointment, 'provider_id')
    user_id = _optional_id(appointment, 'user_id')
    fulfilled_visit_id = _optional_id(appointment, 'fulfilled_visit_id')
    duration = _duration(appointment)
    reason = _text(appointment, 'reason')
    notes = _text(appointment, 'notes')

    status = appointment.get('status') or AppointmentStatusChoices.PENDING
    if status not in ALLOWED_STATUSES:
        raise InvalidStatusError(status, ALLOWED_STATUSES)

    with metrics.appointment_save_duration_seconds.time():
        with transaction.atomic():
            _ensure_exists(Patient, patient_id, 'Patient')
            _ensure_exists(Clinic, clinic_id, 'Clinic')
            _ensure_exists(User, provider_id, 'Provider')
            _ensure_exists(User, user_id, 'User')

            visit_id = appointment.get('current_visit_id')
            visit_created = False
            if not is_valid_uuid(visit_id):
                now = timezone.now()
                visit = Visit.objects.create(
                    id=new_record_id(),
                    patient_id=patient_id,
                    clinic_id=clinic_id,
                    provider_id=user_id,
                    provider_name=current_user_name or '',
                    metadata={},
                    created_at=now,
                    updated_at=now,
                    last_modified=now,
                    server_created_at=now,
                )
                visit_id = visit.id
                visit_created = True
                log_domain_event(
                    'visit_created',
                    entity_type='Visit',
                    entity_id=str(visit.id),
                    entity_ids={'appointment_id': str(record_id), 'patient_id': patient_id},
                )

            # server_created_at is left to the model default so updates keep it
            instance, created = Appointment.objects.update_or_create(
                id=record_id,
                defaults={
                    'provider_id': provider_id,
                    'clinic_id': clinic_id,
                    'patient_id': patient_id,
                    'user_id': user_id,
                    'current_visit_id': visit_id,
                    'fulfilled_visit_id': fulfilled_visit_id,
                    'timestamp': to_safe_datetime(appointment.get('timestamp')),
                    'duration': duration,
                    'reason': reason,
                    'notes': notes,
                    'status': status,
                    'metadata': safe_json_parse(appointment.get('metadata'), {}),
                    'created_at': to_safe_datetime(appointment.get('created_at')),
                    'updated_at': to_safe_datetime(appointment.get('updated_at')),
                    'last_modified': timezone.now(),
                    'is_deleted': False,
                    'deleted_at': None,
                },
            )

    metrics.appointment_saves_total.labels(visit_created=str(visit_created).lower()).inc()
    log_domain_event(
        'appointment_saved',
        entity_type='Appointment',
        entity_id=str(instance.id),
        entity_ids={'visit_id': str(instance.current_visit_id)},
        created=created,
        visit_created=visit_created,
    )
    return instance, visit_created


def soft_delete(appointment_id):
    """Soft-delete an appointment (deleted rows are re-stamped)."""
    if not is_valid_uuid(appointment_id):
        raise RecordNotFoundError('Appointment', appointment_id)

    with transaction.atomic():
        appointment = Appointment.objects.select_for_update().filter(pk=appointment_id).first()
        if appointment is None:
            raise RecordNotFoundError('Appointment', appointment_id)
        appointment.soft_delete()

    log_domain_event('appointment_deleted', entity_type='Appointment', entity_id=str(appointment.id))
    return appointment

"""
Clinic services.

Views call these; they raise domain exceptions from apps.core.exceptions
and never build HTTP responses.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import ClinicHasMembersError, RecordNotFoundError
from apps.core.models import Clinic
from apps.core.observability import log_domain_event, metrics
from apps.core.utils import is_valid_uuid, new_record_id

logger = logging.getLogger(__name__)


def get_all_clinics():
    return Clinic.objects.live().order_by('name')


def get_clinic(clinic_id):
    """Return the live clinic or raise RecordNotFoundError."""
    if not is_valid_uuid(clinic_id):
        raise RecordNotFoundError('Clinic', clinic_id)
    try:
        return Clinic.objects.live().get(pk=clinic_id)
    except Clinic.DoesNotExist:
        raise RecordNotFoundError('Clinic', clinic_id)


def save_clinic(clinic_id, name):
    """
    Create or rename a clinic.

    Short or missing ids (anything that is not a string longer than five
    characters) mean "new clinic".
    """
    if not isinstance(clinic_id, str) or len(clinic_id) <= 5:
        now = timezone.now()
        clinic = Clinic.objects.create(
            id=new_record_id(),
            name=name,
            created_at=now,
            updated_at=now,
            last_modified=now,
            server_created_at=now,
        )
        metrics.clinic_saves_total.labels(operation='create').inc()
        log_domain_event('clinic_saved', entity_type='Clinic', entity_id=str(clinic.id), created=True)
        return clinic

    clinic = get_clinic(clinic_id)
    clinic.name = name
    clinic.touch()
    clinic.save(update_fields=['name', 'updated_at', 'last_modified'])
    metrics.clinic_saves_total.labels(operation='update').inc()
    log_domain_event('clinic_saved', entity_type='Clinic', entity_id=str(clinic.id), created=False)
    return clinic


def soft_delete_clinic(clinic_id):
    """
    Soft-delete a clinic.

    Raises:
        ClinicHasMembersError: live users still belong to the clinic
        RecordNotFoundError: no live clinic with that id
    """
    with transaction.atomic():
        clinic = get_clinic(clinic_id)
        member_count = get_user_model().objects.filter(
            clinic_id=clinic.id, is_deleted=False
        ).count()

        if member_count > 0:
            metrics.clinic_deletes_total.labels(result='blocked').inc()
            log_domain_event(
                'clinic_delete_blocked',
                entity_type='Clinic',
                entity_id=str(clinic.id),
                result='blocked',
                member_count=member_count,
            )
            raise ClinicHasMembersError(clinic.id, member_count)

        clinic.soft_delete()

    metrics.clinic_deletes_total.labels(result='deleted').inc()
    log_domain_event('clinic_deleted', entity_type='Clinic', entity_id=str(clinic.id))
    return clinic

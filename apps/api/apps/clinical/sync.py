"""
Appointment delta sync.

Offline clients push their local changes as deltas. Deltas go straight to the
appointment services: an upsert is a ``save`` keyed by the delta id, a delete
is a soft delete. There is no conflict resolution; the last delta to arrive
wins.
"""
import logging

from django.db import DatabaseError, transaction

from apps.clinical import services
from apps.core.exceptions import DomainError
from apps.core.observability import log_domain_event, metrics
from apps.core.utils import new_record_id

logger = logging.getLogger(__name__)

UPSERT = 'upsert'
DELETE = 'delete'
OPERATIONS = (UPSERT, DELETE)


def upsert_from_delta(delta):
    appointment, _ = services.save(delta.get('id') or new_record_id(), delta, '')
    return appointment


def delete_from_delta(appointment_id):
    return services.soft_delete(appointment_id)


def _apply_change(change, allow_delete=True):
    if not isinstance(change, dict):
        raise DomainError('Change must be an object')

    operation = change.get('operation')
    if operation == UPSERT:
        record = change.get('record')
        if not isinstance(record, dict):
            raise DomainError("Upsert change requires a 'record' object")
        return upsert_from_delta(record)

    if operation == DELETE:
        if not allow_delete:
            raise DomainError("Only admins may delete appointments")
        record = change.get('record')
        record_id = change.get('id') or (record.get('id') if isinstance(record, dict) else None)
        if not record_id:
            raise DomainError("Delete change requires an 'id'")
        return delete_from_delta(record_id)

    raise DomainError(f"Unknown operation '{operation}'. Allowed: {', '.join(OPERATIONS)}")


def apply_appointment_changes(changes, client_id=None, allow_delete=True):
    """
    Apply a batch of appointment deltas in order.

    Each change runs in its own savepoint; a failing change is reported and
    does not undo the others. With ``allow_delete=False`` every delete
    change is rejected (only admins soft-delete appointments).

    Returns:
        {'applied': int, 'errors': [{'index': int, 'error': str}]}
    """
    applied = 0
    errors = []

    for index, change in enumerate(changes):
        operation = change.get('operation') if isinstance(change, dict) else None
        operation_label = operation if operation in OPERATIONS else 'unknown'
        try:
            with transaction.atomic():
                _apply_change(change, allow_delete=allow_delete)
        except (DomainError, DatabaseError, ValueError, OverflowError) as e:
            errors.append({'index': index, 'error': str(e)})
            metrics.sync_deltas_total.labels(
                entity='appointment', operation=operation_label, result='error'
            ).inc()
            logger.warning(
                'Appointment delta rejected',
                extra={
                    'event': 'sync_delta_rejected',
                    'client_id': client_id,
                    'index': index,
                    'operation': operation_label,
                    'exception_type': e.__class__.__name__,
                }
            )
            continue

        applied += 1
        metrics.sync_deltas_total.labels(
            entity='appointment', operation=operation_label, result='applied'
        ).inc()

    log_domain_event(
        'appointment_deltas_applied',
        entity_type='Appointment',
        result='success' if not errors else 'warning',
        client_id=client_id,
        applied=applied,
        rejected=len(errors),
    )
    return {'applied': applied, 'errors': errors}

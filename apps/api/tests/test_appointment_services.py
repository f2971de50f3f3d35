"""
Service-level tests for appointment saves.

The visit insert and the appointment upsert share one transaction.
"""
import uuid
from unittest.mock import patch

import pytest
from django.db import DatabaseError

from apps.clinical import services
from apps.clinical.models import Appointment, Visit
from apps.core.exceptions import InvalidPayloadError, InvalidStatusError, RecordNotFoundError


@pytest.mark.django_db
class TestSave:

    def test_creates_visit_for_current_user(self, appointment_payload, registrar_user):
        appointment, visit_created = services.save(None, appointment_payload, 'Rita Registrar')

        assert visit_created is True
        visit = Visit.objects.get(pk=appointment.current_visit_id)
        assert visit.provider_id == registrar_user.id
        assert visit.provider_name == 'Rita Registrar'
        assert visit.metadata == {}
        assert str(visit.patient_id) == appointment_payload['patient_id']

    def test_explicit_id_wins_over_payload_id(self, appointment_payload):
        explicit = str(uuid.uuid1())
        appointment_payload['id'] = str(uuid.uuid1())

        appointment, _ = services.save(explicit, appointment_payload)

        assert str(appointment.id) == explicit

    def test_metadata_json_string_is_parsed(self, appointment_payload):
        appointment_payload['metadata'] = '{"room": "2B"}'

        appointment, _ = services.save(None, appointment_payload)

        appointment.refresh_from_db()
        assert appointment.metadata == {'room': '2B'}

    def test_upsert_failure_rolls_back_visit(self, appointment_payload):
        with patch.object(Appointment.objects, 'update_or_create', side_effect=DatabaseError('boom')):
            with pytest.raises(DatabaseError):
                services.save(None, appointment_payload, 'Rita Registrar')

        assert Visit.objects.count() == 0
        assert Appointment.objects.count() == 0

    def test_missing_provider_writes_nothing(self, appointment_payload):
        appointment_payload['provider_id'] = str(uuid.uuid1())

        with pytest.raises(RecordNotFoundError):
            services.save(None, appointment_payload)

        assert Visit.objects.count() == 0

    @pytest.mark.parametrize('field, value', [
        ('patient_id', 'nope'),
        ('clinic_id', None),
        ('duration', 'half an hour'),
        ('duration', -5),
        ('duration', 30.5),
        ('duration', 2 ** 31),
        ('duration', True),
        ('notes', 'a\x00b'),
    ])
    def test_bad_payload(self, appointment_payload, field, value):
        appointment_payload[field] = value

        with pytest.raises(InvalidPayloadError):
            services.save(None, appointment_payload)

    @pytest.mark.parametrize('value, expected', [(30.0, 30), ('45', 45), (None, 0), (2147483647, 2147483647)])
    def test_whole_durations_accepted(self, appointment_payload, value, expected):
        appointment_payload['duration'] = value

        appointment, _ = services.save(None, appointment_payload)

        appointment.refresh_from_db()
        assert appointment.duration == expected

    def test_bad_status(self, appointment_payload):
        appointment_payload['status'] = 'no_show'

        with pytest.raises(InvalidStatusError):
            services.save(None, appointment_payload)


@pytest.mark.django_db
class TestReads:

    def test_get_by_id_skips_deleted(self, appointment):
        assert services.get_by_id(str(appointment.id)) == appointment

        appointment.soft_delete()

        assert services.get_by_id(str(appointment.id)) is None
        assert services.get_by_id('garbage') is None

    def test_soft_delete_unknown_raises(self, db):
        with pytest.raises(RecordNotFoundError):
            services.soft_delete(str(uuid.uuid1()))

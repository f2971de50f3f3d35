"""
Tests for the appointment delta-sync endpoint.

POST /api/v1/sync/appointments/ applies upserts and deletes in the order
received. A rejected delta is reported by index and does not undo the
deltas around it.
"""
import uuid

import pytest
from prometheus_client import REGISTRY
from rest_framework import status

from apps.clinical import sync
from apps.clinical.models import Appointment, Visit


def _delta_count(operation, result):
    return REGISTRY.get_sample_value(
        'sync_deltas_total',
        {'entity': 'appointment', 'operation': operation, 'result': result},
    ) or 0.0


@pytest.mark.django_db
class TestDeltaFunctions:
    """upsert_from_delta / delete_from_delta"""

    def test_upsert_uses_delta_id(self, appointment_payload):
        record_id = str(uuid.uuid1())
        appointment_payload['id'] = record_id

        appointment = sync.upsert_from_delta(appointment_payload)

        assert str(appointment.id) == record_id
        visit = Visit.objects.get(pk=appointment.current_visit_id)
        # deltas carry no session user
        assert visit.provider_name == ''

    def test_upsert_without_id_generates_one(self, appointment_payload):
        appointment = sync.upsert_from_delta(appointment_payload)

        assert uuid.UUID(str(appointment.id)).version == 1
        assert Appointment.objects.count() == 1

    def test_delete_soft_deletes(self, appointment):
        sync.delete_from_delta(str(appointment.id))

        appointment.refresh_from_db()
        assert appointment.is_deleted is True
        assert appointment.deleted_at is not None


@pytest.mark.django_db
class TestAppointmentSyncEndpoint:
    """Test POST /api/v1/sync/appointments/"""

    endpoint = '/api/v1/sync/appointments/'

    def test_applies_upserts_and_deletes_in_order(
        self, admin_client, appointment, appointment_payload
    ):
        new_id = str(uuid.uuid1())
        appointment_payload['id'] = new_id

        response = admin_client.post(self.endpoint, {
            'client_id': 'tablet-7',
            'changes': [
                {'operation': 'upsert', 'record': appointment_payload},
                {'operation': 'delete', 'id': str(appointment.id)},
            ],
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'applied': 2, 'errors': []}
        assert Appointment.objects.live().filter(pk=new_id).exists()
        appointment.refresh_from_db()
        assert appointment.is_deleted is True

    def test_later_upsert_wins(self, provider_client, appointment_payload):
        record_id = str(uuid.uuid1())
        first = dict(appointment_payload, id=record_id, reason='Cough')
        second = dict(appointment_payload, id=record_id, reason='Fever', current_visit_id=None)

        response = provider_client.post(self.endpoint, {
            'client_id': 'tablet-7',
            'changes': [
                {'operation': 'upsert', 'record': first},
                {'operation': 'upsert', 'record': second},
            ],
        }, format='json')

        assert response.data['applied'] == 2
        assert Appointment.objects.get(pk=record_id).reason == 'Fever'

    def test_upsert_revives_deleted_appointment(self, provider_client, appointment, appointment_payload):
        appointment.soft_delete()
        appointment_payload['id'] = str(appointment.id)

        response = provider_client.post(self.endpoint, {
            'changes': [{'operation': 'upsert', 'record': appointment_payload}],
        }, format='json')

        assert response.data['applied'] == 1
        appointment.refresh_from_db()
        assert appointment.is_deleted is False
        assert appointment.deleted_at is None

    def test_failed_delta_does_not_roll_back_siblings(self, provider_client, appointment_payload):
        good_id = str(uuid.uuid1())
        bad = dict(appointment_payload, id=str(uuid.uuid1()), patient_id=str(uuid.uuid1()))

        response = provider_client.post(self.endpoint, {
            'client_id': 'tablet-7',
            'changes': [
                {'operation': 'upsert', 'record': bad},
                {'operation': 'upsert', 'record': dict(appointment_payload, id=good_id)},
            ],
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['applied'] == 1
        assert len(response.data['errors']) == 1
        assert response.data['errors'][0]['index'] == 0
        assert 'Patient' in response.data['errors'][0]['error']
        assert Appointment.objects.filter(pk=good_id).exists()
        assert Appointment.objects.count() == 1
        assert Visit.objects.count() == 1

    def test_unknown_operation_is_reported(self, provider_client, appointment_payload):
        response = provider_client.post(self.endpoint, {
            'changes': [{'operation': 'merge', 'record': appointment_payload}],
        }, format='json')

        assert response.data['applied'] == 0
        assert response.data['errors'][0]['index'] == 0
        assert "Unknown operation 'merge'" in response.data['errors'][0]['error']

    def test_delete_of_unknown_id_is_reported(self, admin_client):
        missing = str(uuid.uuid1())

        response = admin_client.post(self.endpoint, {
            'changes': [{'operation': 'delete', 'id': missing}],
        }, format='json')

        assert response.data == {
            'applied': 0,
            'errors': [{'index': 0, 'error': f'Appointment with ID {missing} not found'}],
        }

    def test_delete_accepts_record_id(self, admin_client, appointment):
        response = admin_client.post(self.endpoint, {
            'changes': [{'operation': 'delete', 'record': {'id': str(appointment.id)}}],
        }, format='json')

        assert response.data['applied'] == 1
        appointment.refresh_from_db()
        assert appointment.is_deleted is True

    def test_upsert_without_record_is_reported(self, provider_client, db):
        response = provider_client.post(self.endpoint, {
            'changes': [{'operation': 'upsert'}],
        }, format='json')

        assert response.data['applied'] == 0
        assert "requires a 'record'" in response.data['errors'][0]['error']

    def test_counts_deltas_by_result(self, admin_client, appointment_payload):
        applied_before = _delta_count('upsert', 'applied')
        rejected_before = _delta_count('delete', 'error')

        admin_client.post(self.endpoint, {
            'changes': [
                {'operation': 'upsert', 'record': appointment_payload},
                {'operation': 'delete', 'id': str(uuid.uuid1())},
            ],
        }, format='json')

        assert _delta_count('upsert', 'applied') == applied_before + 1
        assert _delta_count('delete', 'error') == rejected_before + 1

    def test_changes_are_required(self, provider_client):
        response = provider_client.post(self.endpoint, {'client_id': 'tablet-7'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_no_role_forbidden(self, no_role_client):
        response = no_role_client.post(self.endpoint, {'changes': []}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.parametrize('field, value', [
        ('duration', 2 ** 64),
        ('duration', 30.5),
        ('reason', 'Cough\x00'),
        ('notes', 'see\x00chart'),
    ])
    def test_unstorable_values_are_reported(self, provider_client, appointment_payload, field, value):
        good_id = str(uuid.uuid1())
        bad = dict(appointment_payload, id=str(uuid.uuid1()), **{field: value})

        response = provider_client.post(self.endpoint, {
            'changes': [
                {'operation': 'upsert', 'record': dict(appointment_payload, id=good_id)},
                {'operation': 'upsert', 'record': bad},
            ],
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['applied'] == 1
        assert response.data['errors'][0]['index'] == 1
        assert field in response.data['errors'][0]['error']
        assert list(Appointment.objects.values_list('id', flat=True)) == [uuid.UUID(good_id)]

    def test_non_object_change_is_reported_by_index(self, provider_client, appointment_payload):
        good_id = str(uuid.uuid1())

        response = provider_client.post(self.endpoint, {
            'changes': [
                {'operation': 'upsert', 'record': dict(appointment_payload, id=good_id)},
                'garbage',
            ],
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {
            'applied': 1,
            'errors': [{'index': 1, 'error': 'Change must be an object'}],
        }
        assert Appointment.objects.filter(pk=good_id).exists()

    @pytest.mark.parametrize('client_fixture', ['provider_client', 'registrar_client'])
    def test_delete_requires_admin(self, request, client_fixture, appointment, appointment_payload):
        client = request.getfixturevalue(client_fixture)

        response = client.post(self.endpoint, {
            'changes': [
                {'operation': 'delete', 'id': str(appointment.id)},
                {'operation': 'upsert', 'record': appointment_payload},
            ],
        }, format='json')

        assert response.data['applied'] == 1
        assert response.data['errors'] == [
            {'index': 0, 'error': 'Only admins may delete appointments'},
        ]
        appointment.refresh_from_db()
        assert appointment.is_deleted is False


@pytest.mark.django_db
class TestAppointmentSyncSchema:

    def test_schema_documents_request_and_response(self, admin_client):
        response = admin_client.get('/api/schema/', {'format': 'json'})

        assert response.status_code == status.HTTP_200_OK
        schema = response.content.decode()
        assert '/api/v1/sync/appointments/' in schema
        assert 'AppointmentSyncResponse' in schema

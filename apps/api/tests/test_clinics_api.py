"""
Integration tests for Clinic API endpoints and clinic services.

Covers create-or-rename semantics of save_clinic and the member guard on
soft delete.
"""
import uuid

import pytest
from rest_framework import status

from apps.core import services
from apps.core.exceptions import ClinicHasMembersError, RecordNotFoundError
from apps.core.models import Clinic


@pytest.mark.django_db
class TestSaveClinic:
    """save_clinic(id, name)"""

    @pytest.mark.parametrize('clinic_id', [None, '', 'new', '12345', 42])
    def test_short_or_missing_id_creates_clinic(self, clinic_id):
        clinic = services.save_clinic(clinic_id, 'Riverside')

        assert Clinic.objects.count() == 1
        assert clinic.name == 'Riverside'
        assert uuid.UUID(str(clinic.id)).version == 1
        assert clinic.is_deleted is False
        assert clinic.created_at == clinic.updated_at == clinic.last_modified == clinic.server_created_at

    def test_existing_id_renames(self, clinic):
        before = clinic.last_modified

        saved = services.save_clinic(str(clinic.id), 'Main Clinic (North)')

        clinic.refresh_from_db()
        assert saved.id == clinic.id
        assert clinic.name == 'Main Clinic (North)'
        assert clinic.last_modified >= before
        assert Clinic.objects.count() == 1

    def test_rename_unknown_id_raises(self, db):
        with pytest.raises(RecordNotFoundError):
            services.save_clinic(str(uuid.uuid1()), 'Nowhere')


@pytest.mark.django_db
class TestSoftDeleteClinic:
    """soft_delete_clinic(id)"""

    def test_clinic_with_users_cannot_be_deleted(self, clinic, provider_user, registrar_user):
        with pytest.raises(ClinicHasMembersError) as excinfo:
            services.soft_delete_clinic(str(clinic.id))

        assert str(excinfo.value) == (
            f"Cannot delete clinic with ID {clinic.id} because it has 2 registered users. "
            f"Please remove or reassign all users before deleting the clinic."
        )
        clinic.refresh_from_db()
        assert clinic.is_deleted is False

    def test_deleted_users_do_not_block(self, clinic, provider_user):
        provider_user.soft_delete()

        services.soft_delete_clinic(str(clinic.id))

        clinic.refresh_from_db()
        assert clinic.is_deleted is True
        assert clinic.deleted_at is not None

    def test_empty_clinic_is_soft_deleted(self, other_clinic):
        services.soft_delete_clinic(str(other_clinic.id))

        other_clinic.refresh_from_db()
        assert other_clinic.is_deleted is True
        assert Clinic.objects.filter(pk=other_clinic.pk).exists()
        assert not services.get_all_clinics().filter(pk=other_clinic.pk).exists()


@pytest.mark.django_db
class TestClinicAPI:
    """Test /api/v1/clinics/"""

    endpoint = '/api/v1/clinics/'

    def test_list_excludes_deleted(self, registrar_client, clinic, other_clinic):
        other_clinic.soft_delete()

        response = registrar_client.get(self.endpoint)

        assert response.status_code == status.HTTP_200_OK
        assert [row['id'] for row in response.data['results']] == [str(clinic.id)]

    def test_admin_creates_clinic(self, admin_client):
        response = admin_client.post(self.endpoint, {'name': 'Lakeside'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['name'] == 'Lakeside'
        assert Clinic.objects.filter(name='Lakeside').exists()

    def test_provider_cannot_create_clinic(self, provider_client):
        response = provider_client.post(self.endpoint, {'name': 'Lakeside'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_admin_renames_clinic(self, admin_client, other_clinic):
        response = admin_client.patch(
            f'{self.endpoint}{other_clinic.id}/', {'name': 'Hilltop'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['name'] == 'Hilltop'

    def test_delete_with_members_returns_conflict(self, admin_client, clinic, provider_user):
        response = admin_client.delete(f'{self.endpoint}{clinic.id}/')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert 'registered users' in response.data['error']

    def test_delete_empty_clinic(self, admin_client, other_clinic):
        response = admin_client.delete(f'{self.endpoint}{other_clinic.id}/')

        assert response.status_code == status.HTTP_204_NO_CONTENT
        other_clinic.refresh_from_db()
        assert other_clinic.is_deleted is True

    def test_retrieve_deleted_not_found(self, registrar_client, other_clinic):
        other_clinic.soft_delete()

        response = registrar_client.get(f'{self.endpoint}{other_clinic.id}/')

        assert response.status_code == status.HTTP_404_NOT_FOUND

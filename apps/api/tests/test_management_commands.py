"""
Tests for bootstrap management commands.
"""
from io import StringIO

import pytest
from django.core.management import call_command

from apps.authz.models import Role, RoleChoices, User
from apps.core.models import Clinic


@pytest.mark.django_db
class TestBootstrapCommands:

    def test_roles_are_seeded_by_migration(self):
        assert set(Role.objects.values_list('name', flat=True)) == set(RoleChoices.values)

    def test_seed_demo_clinic_is_idempotent(self):
        call_command('seed_demo_clinic', stdout=StringIO())
        call_command('seed_demo_clinic', stdout=StringIO())

        clinic = Clinic.objects.get(name='Demo Clinic')
        assert Clinic.objects.count() == 1
        assert clinic.users.count() == 3
        assert User.objects.get(email='registrar@example.com').role == RoleChoices.REGISTRAR

    def test_ensure_superuser(self, monkeypatch):
        monkeypatch.setenv('DJANGO_SUPERUSER_EMAIL', 'root@example.com')
        monkeypatch.setenv('DJANGO_SUPERUSER_PASSWORD', 'supersecret1')

        call_command('ensure_superuser', stdout=StringIO())
        call_command('ensure_superuser', stdout=StringIO())

        user = User.objects.get(email='root@example.com')
        assert user.is_superuser is True
        assert user.check_password('supersecret1')
        assert user.role_names == [RoleChoices.ADMIN]

"""
Global test fixtures for pytest.

Provides reusable fixtures for API testing:
- Authenticated API clients by role
- Model instances (Clinic, Patient, Visit, Appointment)
"""
from datetime import timedelta

import pytest
from rest_framework.test import APIClient
from django.utils import timezone
from apps.authz.models import User, Role, UserRole, RoleChoices
from apps.core.models import Clinic
from apps.clinical.models import Patient, Visit, Appointment


def _create_user_with_role(email, role_name, **extra_fields):
    user = User.objects.create_user(
        email=email,
        password='testpass123',
        is_active=True,
        **extra_fields
    )
    role, _ = Role.objects.get_or_create(name=role_name)
    UserRole.objects.create(user=user, role=role)
    return user


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture
def clinic(db):
    """Create a clinic."""
    return Clinic.objects.create(name='Main Clinic')


@pytest.fixture
def other_clinic(db):
    return Clinic.objects.create(name='Hillside Clinic')


# ============================================================================
# User Fixtures
# ============================================================================

@pytest.fixture
def admin_user(db):
    """Admin user (without authenticated client)."""
    return _create_user_with_role(
        'admin@test.com',
        RoleChoices.ADMIN,
        name='Ada Admin',
        is_staff=True,
        is_superuser=True,
    )


@pytest.fixture
def provider_user(db, clinic):
    """Provider attached to the main clinic."""
    return _create_user_with_role(
        'provider@test.com',
        RoleChoices.PROVIDER,
        name='Dr. Paula Provider',
        clinic=clinic,
    )


@pytest.fixture
def registrar_user(db, clinic):
    return _create_user_with_role(
        'registrar@test.com',
        RoleChoices.REGISTRAR,
        name='Rita Registrar',
        clinic=clinic,
    )


# ============================================================================
# API Clients
# ============================================================================

@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


@pytest.fixture
def admin_client(admin_user):
    """
    Authenticated API client with Admin role.
    Admin has full access to all resources.
    """
    return _client_for(admin_user)


@pytest.fixture
def provider_client(provider_user):
    """
    Authenticated API client with Provider role.
    Providers read and write clinical records but cannot delete.
    """
    return _client_for(provider_user)


@pytest.fixture
def registrar_client(registrar_user):
    """Authenticated API client with Registrar role."""
    return _client_for(registrar_user)


@pytest.fixture
def no_role_client(db):
    """Authenticated user without any role (should receive 403)."""
    user = User.objects.create_user(email='norole@test.com', password='testpass123')
    return _client_for(user)


# ============================================================================
# Clinical Fixtures
# ============================================================================

@pytest.fixture
def patient(db, clinic):
    """Create a patient."""
    return Patient.objects.create(
        given_name='John',
        surname='Doe',
        date_of_birth='1990-01-15',
        sex='male',
        citizenship='Kenyan',
        phone='+254700000000',
        government_id='ID-12345',
        external_patient_id='EXT-001',
        primary_clinic=clinic,
        metadata={'allergies': ['penicillin']},
    )


@pytest.fixture
def visit(db, patient, clinic, provider_user):
    return Visit.objects.create(
        patient=patient,
        clinic=clinic,
        provider=provider_user,
        provider_name=provider_user.name,
    )


@pytest.fixture
def appointment(db, patient, clinic, provider_user, registrar_user, visit):
    """Create an appointment booked by the registrar for the provider."""
    return Appointment.objects.create(
        patient=patient,
        clinic=clinic,
        provider=provider_user,
        user=registrar_user,
        current_visit_id=visit.id,
        timestamp=timezone.now() + timedelta(days=1),
        duration=30,
        reason='Follow-up',
        notes='Bring previous results',
        status='pending',
    )


# ============================================================================
# Factory-style Fixtures (for creating multiple instances)
# ============================================================================

@pytest.fixture
def patient_factory(db, clinic):
    """
    Factory fixture for creating multiple patients.

    Usage:
        patient1 = patient_factory(given_name='Jane', surname='Smith')
    """
    def _create_patient(**kwargs):
        defaults = {
            'given_name': 'Test',
            'surname': 'Patient',
            'sex': 'female',
            'primary_clinic': clinic,
        }
        defaults.update(kwargs)
        return Patient.objects.create(**defaults)

    return _create_patient


@pytest.fixture
def appointment_factory(db, patient, clinic, provider_user, registrar_user, visit):
    """
    Factory fixture for creating multiple appointments.

    Usage:
        apt1 = appointment_factory(status='confirmed')
        apt2 = appointment_factory(provider=None)
    """
    created_appointments = []

    def _create_appointment(**kwargs):
        defaults = {
            'patient': patient,
            'clinic': clinic,
            'provider': provider_user,
            'user': registrar_user,
            'current_visit_id': visit.id,
            'status': 'pending',
            'duration': 15,
            'timestamp': timezone.now() + timedelta(days=len(created_appointments) + 1),
        }
        defaults.update(kwargs)

        appointment = Appointment.objects.create(**defaults)
        created_appointments.append(appointment)
        return appointment

    return _create_appointment


@pytest.fixture
def appointment_payload(patient, clinic, provider_user, registrar_user):
    """Client-shaped appointment payload without a visit."""
    return {
        'provider_id': str(provider_user.id),
        'clinic_id': str(clinic.id),
        'patient_id': str(patient.id),
        'user_id': str(registrar_user.id),
        'current_visit_id': '',
        'fulfilled_visit_id': None,
        'timestamp': '2026-03-02T09:30:00Z',
        'duration': 20,
        'reason': 'Cough',
        'notes': '',
        'status': 'pending',
        'metadata': {'source': 'tablet'},
        'created_at': '2026-03-01T08:00:00Z',
        'updated_at': '2026-03-01T08:05:00Z',
    }

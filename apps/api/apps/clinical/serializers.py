"""
Clinical serializers for Patient, Visit and Appointment.
"""
from rest_framework import serializers

from apps.authz.models import User
from apps.authz.serializers import UserSerializer
from apps.clinical.models import (
    Appointment,
    AppointmentStatusChoices,
    Patient,
    Visit,
)
from apps.core.models import Clinic
from apps.core.serializers import ClinicSerializer

BOOKKEEPING_FIELDS = [
    'is_deleted',
    'created_at',
    'updated_at',
    'last_modified',
    'server_created_at',
    'deleted_at',
]


# ============================================================================
# Patients
# ============================================================================

class PatientListSerializer(serializers.ModelSerializer):
    """Serializer for Patient list view (limited fields)"""
    primary_clinic_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Patient
        fields = [
            'id',
            'given_name',
            'surname',
            'date_of_birth',
            'sex',
            'phone',
            'primary_clinic_id',
            'is_deleted',
            'updated_at',
        ]
        read_only_fields = fields


class PatientSerializer(serializers.ModelSerializer):
    """Serializer for Patient detail/create/update (all fields)."""
    primary_clinic_id = serializers.PrimaryKeyRelatedField(
        source='primary_clinic',
        queryset=Clinic.objects.live(),
        allow_null=True,
        required=False
    )

    class Meta:
        model = Patient
        fields = [
            'id',
            'given_name',
            'surname',
            'date_of_birth',
            'sex',
            'citizenship',
            'phone',
            'government_id',
            'external_patient_id',
            'primary_clinic_id',
            'metadata',
        ] + BOOKKEEPING_FIELDS
        read_only_fields = ['id'] + BOOKKEEPING_FIELDS

    def validate_metadata(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("metadata must be a JSON object")
        return value

    def validate(self, attrs):
        given_name = attrs.get('given_name', getattr(self.instance, 'given_name', ''))
        surname = attrs.get('surname', getattr(self.instance, 'surname', ''))
        if not (given_name or surname):
            raise serializers.ValidationError("A patient needs a given name or a surname.")
        return attrs

    def update(self, instance, validated_data):
        instance.touch()
        return super().update(instance, validated_data)


# ============================================================================
# Visits
# ============================================================================

class VisitSerializer(serializers.ModelSerializer):
    patient_id = serializers.UUIDField(read_only=True)
    clinic_id = serializers.UUIDField(read_only=True)
    provider_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Visit
        fields = [
            'id',
            'patient_id',
            'clinic_id',
            'provider_id',
            'provider_name',
            'check_in_timestamp',
            'metadata',
        ] + BOOKKEEPING_FIELDS
        read_only_fields = fields


# ============================================================================
# Appointments
# ============================================================================

class AppointmentSerializer(serializers.ModelSerializer):
    """Read serializer for appointments, using client field names."""
    provider_id = serializers.UUIDField(read_only=True)
    clinic_id = serializers.UUIDField(read_only=True)
    patient_id = serializers.UUIDField(read_only=True)
    user_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Appointment
        fields = [
            'id',
            'provider_id',
            'clinic_id',
            'patient_id',
            'user_id',
            'current_visit_id',
            'fulfilled_visit_id',
            'timestamp',
            'duration',
            'reason',
            'notes',
            'status',
            'metadata',
        ] + BOOKKEEPING_FIELDS
        read_only_fields = fields


class AppointmentWriteSerializer(serializers.Serializer):
    """
    Input for appointment create/update.

    ``current_visit_id`` may be empty: a visit is then created on save.
    Validated data is handed to apps.clinical.services.save unchanged.
    """
    id = serializers.UUIDField(required=False)
    provider_id = serializers.UUIDField(required=False, allow_null=True)
    clinic_id = serializers.UUIDField()
    patient_id = serializers.UUIDField()
    user_id = serializers.UUIDField(required=False, allow_null=True)
    current_visit_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    fulfilled_visit_id = serializers.UUIDField(required=False, allow_null=True)
    timestamp = serializers.DateTimeField()
    duration = serializers.IntegerField(min_value=0, max_value=2147483647, default=0)
    reason = serializers.CharField(required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    status = serializers.ChoiceField(
        choices=AppointmentStatusChoices.choices,
        default=AppointmentStatusChoices.PENDING
    )
    metadata = serializers.JSONField(required=False, default=dict)
    created_at = serializers.DateTimeField(required=False)
    updated_at = serializers.DateTimeField(required=False)

    def validate_patient_id(self, value):
        if not Patient.objects.live().filter(pk=value).exists():
            raise serializers.ValidationError(f"Patient with ID {value} not found")
        return value

    def validate_clinic_id(self, value):
        if not Clinic.objects.live().filter(pk=value).exists():
            raise serializers.ValidationError(f"Clinic with ID {value} not found")
        return value

    def validate_provider_id(self, value):
        if value is not None and not User.objects.live().filter(pk=value).exists():
            raise serializers.ValidationError(f"Provider with ID {value} not found")
        return value

    def validate_metadata(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("metadata must be a JSON object")
        return value


class AppointmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=AppointmentStatusChoices.choices)


class AppointmentWithDetailsSerializer(serializers.Serializer):
    """Appointment joined with its patient, clinic and provider."""
    appointment = AppointmentSerializer()
    patient = PatientSerializer()
    clinic = ClinicSerializer()
    provider = UserSerializer()


# ============================================================================
# Sync
# ============================================================================

class AppointmentSyncRequestSerializer(serializers.Serializer):
    """
    Body of POST /api/v1/sync/appointments/.

    Per-change validation happens while applying, so one bad change is
    reported by index instead of rejecting the batch.
    """
    client_id = serializers.CharField(required=False, allow_blank=True, default='')
    changes = serializers.ListField(allow_empty=True)


class AppointmentSyncResponseSerializer(serializers.Serializer):
    applied = serializers.IntegerField()
    errors = serializers.ListField(child=serializers.DictField())

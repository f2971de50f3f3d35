"""
Core serializers: clinics.
"""
from rest_framework import serializers

from apps.core.models import Clinic


class ClinicSerializer(serializers.ModelSerializer):
    """Read serializer for clinics (all bookkeeping fields exposed)."""

    class Meta:
        model = Clinic
        fields = [
            'id',
            'name',
            'is_deleted',
            'created_at',
            'updated_at',
            'last_modified',
            'server_created_at',
            'deleted_at',
        ]
        read_only_fields = fields


class ClinicWriteSerializer(serializers.Serializer):
    """
    Input for create/rename.

    ``id`` is optional: short or missing ids create a new clinic.
    """
    id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    name = serializers.CharField(max_length=255, allow_null=True, allow_blank=True)

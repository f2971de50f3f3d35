"""
Authz serializers: users / providers.
"""
from rest_framework import serializers

from apps.authz.models import RoleChoices, User
from apps.core.models import Clinic


class UserSerializer(serializers.ModelSerializer):
    """Read serializer for users (providers)."""
    role = serializers.CharField(read_only=True)
    roles = serializers.ListField(source='role_names', read_only=True)
    clinic_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'role',
            'roles',
            'clinic_id',
            'is_active',
            'is_staff',
            'is_deleted',
            'created_at',
            'updated_at',
            'last_modified',
            'server_created_at',
            'deleted_at',
        ]
        read_only_fields = fields


class UserWriteSerializer(serializers.ModelSerializer):
    """
    Create/update serializer (Admin only).

    ``role`` replaces the user's roles; ``password`` is optional on update.
    """
    role = serializers.ChoiceField(choices=RoleChoices.choices, required=False)
    clinic_id = serializers.UUIDField(required=False, allow_null=True)
    password = serializers.CharField(write_only=True, required=False, min_length=8)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'role',
            'clinic_id',
            'is_active',
            'is_staff',
            'password',
        ]
        read_only_fields = ['id']

    def validate_email(self, value):
        queryset = User.objects.filter(email__iexact=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def validate_clinic_id(self, value):
        if value is not None and not Clinic.objects.live().filter(pk=value).exists():
            raise serializers.ValidationError(f"Clinic with ID {value} not found")
        return value

    def create(self, validated_data):
        role = validated_data.pop('role', RoleChoices.PROVIDER)
        password = validated_data.pop('password', None)
        user = User.objects.create_user(password=password, **validated_data)
        user.set_role(role)
        return user

    def update(self, instance, validated_data):
        role = validated_data.pop('role', None)
        password = validated_data.pop('password', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.touch()
        instance.save()
        if role:
            instance.set_role(role)
        return instance


class CurrentUserSerializer(serializers.ModelSerializer):
    """Profile of the authenticated user (GET /api/v1/auth/me/)."""
    roles = serializers.ListField(source='role_names', read_only=True)
    clinic_id = serializers.UUIDField(read_only=True)
    clinic_name = serializers.CharField(source='clinic.name', read_only=True, default=None)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'roles',
            'clinic_id',
            'clinic_name',
            'is_staff',
            'last_login',
        ]
        read_only_fields = fields

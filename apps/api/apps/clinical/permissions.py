"""
Clinical permissions for API endpoints.

- Admin: full access, soft delete, may list deleted rows
- Provider, Registrar: read and write clinical records, no delete
"""
from rest_framework import permissions
from apps.authz.models import RoleChoices

CLINICAL_ROLES = {RoleChoices.ADMIN, RoleChoices.PROVIDER, RoleChoices.REGISTRAR}


def _user_roles(request):
    return set(request.user.user_roles.values_list('role__name', flat=True))


class ClinicalRecordPermission(permissions.BasePermission):
    """
    Permission for Patient and Appointment endpoints.

    - Admin: Full access (read, write, soft-delete)
    - Provider: Read, create, update
    - Registrar: Read, create, update
    """

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        user_roles = _user_roles(request)

        if request.method == 'DELETE':
            return RoleChoices.ADMIN in user_roles

        return bool(user_roles & CLINICAL_ROLES)


class PatientPermission(ClinicalRecordPermission):
    pass


class AppointmentPermission(ClinicalRecordPermission):
    pass


class VisitPermission(permissions.BasePermission):
    """Visits are read-only over the API; they are written by appointment saves."""

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.method not in permissions.SAFE_METHODS:
            return False
        return bool(_user_roles(request) & CLINICAL_ROLES)


class SyncPermission(permissions.BasePermission):
    """
    Delta push. Clients may carry deletes, so any clinical role may push;
    deletes from sync are soft deletes.
    """

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return bool(_user_roles(request) & CLINICAL_ROLES)

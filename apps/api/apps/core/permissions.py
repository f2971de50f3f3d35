"""
Core permissions.
"""
from rest_framework import permissions

from apps.authz.models import RoleChoices


class ClinicPermission(permissions.BasePermission):
    """
    - Admin: full access
    - Provider, Registrar: read-only
    """

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        user_roles = set(
            request.user.user_roles.values_list('role__name', flat=True)
        )

        if request.method in permissions.SAFE_METHODS:
            return bool(user_roles & {
                RoleChoices.ADMIN,
                RoleChoices.PROVIDER,
                RoleChoices.REGISTRAR,
            })

        return RoleChoices.ADMIN in user_roles

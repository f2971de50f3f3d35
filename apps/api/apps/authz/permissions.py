"""
Authz permissions for user administration and provider lookup.
"""
from rest_framework import permissions
from apps.authz.models import RoleChoices


def user_role_names(user):
    return set(user.user_roles.values_list('role__name', flat=True))


class IsAdmin(permissions.BasePermission):
    """Only allows users holding the admin role."""

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return RoleChoices.ADMIN in user_role_names(request.user)


class ProviderDirectoryPermission(permissions.BasePermission):
    """
    Provider directory is readable by every role.

    - Admin, Provider, Registrar: read-only
    """

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.method not in permissions.SAFE_METHODS:
            return False
        return bool(user_role_names(request.user) & {
            RoleChoices.ADMIN,
            RoleChoices.PROVIDER,
            RoleChoices.REGISTRAR,
        })

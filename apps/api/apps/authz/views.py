"""
Authz views: user administration, provider directory, current user.
"""
from django.db import models, transaction
from rest_framework import generics, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.authz.models import RoleChoices, User
from apps.authz.permissions import IsAdmin, ProviderDirectoryPermission, user_role_names
from apps.authz.serializers import CurrentUserSerializer, UserSerializer, UserWriteSerializer
from apps.core.observability import log_domain_event
from apps.core.query_params import uuid_query_param


def _filter_users(queryset, request):
    """Shared list filters: ?clinic_id, ?role, ?q, ?include_deleted (admin)."""
    include_deleted = request.query_params.get('include_deleted', 'false').lower() == 'true'
    if not (include_deleted and RoleChoices.ADMIN in user_role_names(request.user)):
        queryset = queryset.filter(is_deleted=False)

    clinic_id = uuid_query_param(request, 'clinic_id')
    if clinic_id:
        queryset = queryset.filter(clinic_id=clinic_id)

    role = request.query_params.get('role')
    if role:
        queryset = queryset.filter(user_roles__role__name=role).distinct()

    q = request.query_params.get('q')
    if q:
        queryset = queryset.filter(
            models.Q(email__icontains=q) | models.Q(name__icontains=q)
        )
    return queryset.order_by('name', 'email')


class UserViewSet(viewsets.ModelViewSet):
    """
    ViewSet for user administration (Admin only).

    Endpoints:
    - GET /api/v1/users/
    - POST /api/v1/users/
    - GET /api/v1/users/{id}/
    - PATCH /api/v1/users/{id}/
    - DELETE /api/v1/users/{id}/ (soft delete)
    """
    permission_classes = [IsAdmin]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = User.objects.select_related('clinic').prefetch_related('user_roles__role')
        return _filter_users(queryset, self.request)

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return UserWriteSerializer
        return UserSerializer

    @transaction.atomic
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        log_domain_event('user_created', entity_type='User', entity_id=str(user.id), role=user.role)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    @transaction.atomic
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', True)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        log_domain_event('user_updated', entity_type='User', entity_id=str(user.id))
        return Response(UserSerializer(user).data)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        instance.soft_delete()
        log_domain_event('user_deleted', entity_type='User', entity_id=str(instance.id))
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProviderViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Provider directory: users holding the provider role.

    Endpoints:
    - GET /api/v1/providers/?clinic_id=
    - GET /api/v1/providers/{id}/
    """
    permission_classes = [ProviderDirectoryPermission]
    serializer_class = UserSerializer

    def get_queryset(self):
        queryset = User.objects.select_related('clinic').filter(
            user_roles__role__name=RoleChoices.PROVIDER
        ).distinct()
        return _filter_users(queryset, self.request)


class CurrentUserView(generics.RetrieveAPIView):
    """GET /api/v1/auth/me/"""
    permission_classes = [IsAuthenticated]
    serializer_class = CurrentUserSerializer

    def get_object(self):
        return self.request.user

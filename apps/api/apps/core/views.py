"""
Core views: clinics.
"""
import logging

from rest_framework import status, viewsets
from rest_framework.response import Response

from apps.authz.models import RoleChoices
from apps.core import services
from apps.core.exceptions import ClinicHasMembersError, RecordNotFoundError
from apps.core.models import Clinic
from apps.core.permissions import ClinicPermission
from apps.core.serializers import ClinicSerializer, ClinicWriteSerializer

logger = logging.getLogger(__name__)


class ClinicViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Clinic endpoints.

    Endpoints:
    - GET /api/v1/clinics/
    - POST /api/v1/clinics/
    - GET /api/v1/clinics/{id}/
    - PATCH /api/v1/clinics/{id}/
    - DELETE /api/v1/clinics/{id}/ (soft delete, 409 while users remain)
    """
    permission_classes = [ClinicPermission]
    serializer_class = ClinicSerializer
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        user_roles = set(
            self.request.user.user_roles.values_list('role__name', flat=True)
        )
        include_deleted = self.request.query_params.get('include_deleted', 'false').lower() == 'true'
        if include_deleted and RoleChoices.ADMIN in user_roles:
            queryset = Clinic.objects.all()
        else:
            queryset = services.get_all_clinics()
        return queryset.order_by('name')

    def create(self, request, *args, **kwargs):
        serializer = ClinicWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            clinic = services.save_clinic(
                serializer.validated_data.get('id'),
                serializer.validated_data['name'],
            )
        except RecordNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(ClinicSerializer(clinic).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = ClinicWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        clinic = services.save_clinic(
            str(instance.id),
            serializer.validated_data.get('name', instance.name),
        )
        return Response(ClinicSerializer(clinic).data)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            services.soft_delete_clinic(str(instance.id))
        except ClinicHasMembersError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        return Response(status=status.HTTP_204_NO_CONTENT)

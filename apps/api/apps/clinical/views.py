"""
Clinical viewsets for Patient, Visit and Appointment, plus the appointment
delta-sync endpoint.
"""
import logging
from datetime import datetime

from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.authz.models import RoleChoices
from apps.clinical import services, sync
from apps.clinical.models import Appointment, Patient, Visit
from apps.clinical.permissions import (
    AppointmentPermission,
    PatientPermission,
    SyncPermission,
    VisitPermission,
)
from apps.clinical.serializers import (
    AppointmentSerializer,
    AppointmentStatusSerializer,
    AppointmentSyncRequestSerializer,
    AppointmentSyncResponseSerializer,
    AppointmentWithDetailsSerializer,
    AppointmentWriteSerializer,
    PatientListSerializer,
    PatientSerializer,
    VisitSerializer,
)
from apps.core.exceptions import (
    DomainError,
    InvalidPayloadError,
    InvalidStatusError,
    RecordNotFoundError,
)
from apps.core.observability import log_domain_event
from apps.core.query_params import date_query_param, uuid_query_param

logger = logging.getLogger(__name__)


def _user_role_names(user):
    return set(user.user_roles.values_list('role__name', flat=True))


def _include_deleted(request):
    """?include_deleted=true is honoured for admins only."""
    include_deleted = request.query_params.get('include_deleted', 'false').lower() == 'true'
    if not include_deleted:
        return False
    return RoleChoices.ADMIN in _user_role_names(request.user)


def _current_user_name(user):
    return user.name or user.email


def _domain_error_response(exc):
    if isinstance(exc, RecordNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (InvalidStatusError, InvalidPayloadError)):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_409_CONFLICT
    return Response({'error': str(exc)}, status=code)


class PatientViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Patient endpoints.

    Endpoints:
    - POST /api/v1/patients/
    - GET /api/v1/patients/?q=&clinic_id=
    - GET /api/v1/patients/{id}/
    - PATCH /api/v1/patients/{id}/
    - DELETE /api/v1/patients/{id}/ (Admin only, soft delete)
    """
    permission_classes = [PatientPermission]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = Patient.objects.all()
        if not _include_deleted(self.request):
            queryset = queryset.filter(is_deleted=False)

        q = self.request.query_params.get('q')
        if q:
            queryset = queryset.filter(
                Q(given_name__icontains=q) |
                Q(surname__icontains=q) |
                Q(phone__icontains=q) |
                Q(government_id__icontains=q) |
                Q(external_patient_id__icontains=q)
            )

        clinic_id = uuid_query_param(self.request, 'clinic_id')
        if clinic_id:
            queryset = queryset.filter(primary_clinic_id=clinic_id)

        return queryset.order_by('surname', 'given_name')

    def get_serializer_class(self):
        if self.action == 'list':
            return PatientListSerializer
        return PatientSerializer

    def perform_create(self, serializer):
        patient = serializer.save()
        log_domain_event('patient_created', entity_type='Patient', entity_id=str(patient.id))

    def perform_update(self, serializer):
        patient = serializer.save()
        log_domain_event('patient_updated', entity_type='Patient', entity_id=str(patient.id))

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        instance.soft_delete()
        log_domain_event('patient_deleted', entity_type='Patient', entity_id=str(instance.id))
        return Response(status=status.HTTP_204_NO_CONTENT)


class VisitViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only Visit endpoints. Visits are created by appointment saves.

    - GET /api/v1/visits/?patient_id=&clinic_id=&provider_id=
    - GET /api/v1/visits/{id}/
    """
    permission_classes = [VisitPermission]
    serializer_class = VisitSerializer

    def get_queryset(self):
        queryset = Visit.objects.all()
        if not _include_deleted(self.request):
            queryset = queryset.filter(is_deleted=False)

        for param in ('patient_id', 'clinic_id', 'provider_id'):
            value = uuid_query_param(self.request, param)
            if value:
                queryset = queryset.filter(**{param: value})

        return queryset.order_by('-created_at')


class AppointmentViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Appointment endpoints.

    Endpoints:
    - POST /api/v1/appointments/ (upsert; creates a visit when none is given)
    - GET /api/v1/appointments/
    - GET /api/v1/appointments/details/
    - GET /api/v1/appointments/{id}/
    - PUT/PATCH /api/v1/appointments/{id}/
    - POST /api/v1/appointments/{id}/toggle-status/
    - DELETE /api/v1/appointments/{id}/ (Admin only, soft delete)
    """
    permission_classes = [AppointmentPermission]
    serializer_class = AppointmentSerializer

    def get_queryset(self):
        """
        Filters:
        - status, patient_id, clinic_id, provider_id
        - date_from / date_to: bounds on timestamp
        - include_deleted: Admin only
        """
        if _include_deleted(self.request):
            queryset = Appointment.objects.all()
        else:
            queryset = services.get_all()

        appointment_status = self.request.query_params.get('status')
        if appointment_status:
            queryset = queryset.filter(status=appointment_status)

        for param in ('patient_id', 'clinic_id', 'provider_id'):
            value = uuid_query_param(self.request, param)
            if value:
                queryset = queryset.filter(**{param: value})

        # plain dates compare against the calendar day
        for param, lookup in (('date_from', 'gte'), ('date_to', 'lte')):
            value = date_query_param(self.request, param)
            if value is None:
                continue
            if isinstance(value, datetime):
                queryset = queryset.filter(**{f'timestamp__{lookup}': value})
            else:
                queryset = queryset.filter(**{f'timestamp__date__{lookup}': value})

        return queryset.order_by('-timestamp')

    def _save(self, request, appointment_id, data):
        serializer = AppointmentWriteSerializer(data=data)
        serializer.is_valid(raise_exception=True)
        payload = dict(serializer.validated_data)
        if not payload.get('user_id'):
            payload['user_id'] = request.user.id
        appointment, _ = services.save(appointment_id, payload, _current_user_name(request.user))
        return appointment

    def create(self, request, *args, **kwargs):
        try:
            appointment = self._save(request, None, request.data)
        except DomainError as e:
            return _domain_error_response(e)
        return Response(AppointmentSerializer(appointment).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        """PUT/PATCH: fields not sent keep their stored values; updated_at is bumped."""
        kwargs.pop('partial', None)
        instance = self.get_object()

        data = dict(AppointmentSerializer(instance).data)
        data.pop('updated_at', None)
        data.update(request.data)
        data.pop('id', None)

        try:
            appointment = self._save(request, str(instance.id), data)
        except DomainError as e:
            return _domain_error_response(e)
        return Response(AppointmentSerializer(appointment).data)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        services.soft_delete(str(instance.id))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'], url_path='details')
    def details(self, request):
        """
        GET /api/v1/appointments/details/

        Each row: {appointment, patient, clinic, provider}. Appointments
        without a provider are not listed.
        """
        rows = services.get_all_with_details()
        page = self.paginate_queryset(rows)
        if page is not None:
            return self.get_paginated_response(AppointmentWithDetailsSerializer(page, many=True).data)
        return Response(AppointmentWithDetailsSerializer(rows, many=True).data)

    @action(detail=True, methods=['post'], url_path='toggle-status')
    def toggle_status(self, request, pk=None):
        """
        POST /api/v1/appointments/{id}/toggle-status/

        Request body: {"status": "confirmed"}
        """
        serializer = AppointmentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            appointment = services.toggle_status(pk, serializer.validated_data['status'])
        except DomainError as e:
            return _domain_error_response(e)
        return Response(AppointmentSerializer(appointment).data, status=status.HTTP_200_OK)


class AppointmentSyncView(APIView):
    """
    POST /api/v1/sync/appointments/

    Request body:
    {
        "client_id": "device-123",
        "changes": [
            {"operation": "upsert", "record": {...appointment...}},
            {"operation": "delete", "id": "..."}
        ]
    }

    Response: {"applied": 1, "errors": [{"index": 1, "error": "..."}]}
    """
    permission_classes = [SyncPermission]

    @extend_schema(
        request=AppointmentSyncRequestSerializer,
        responses={200: AppointmentSyncResponseSerializer},
    )
    def post(self, request):
        serializer = AppointmentSyncRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = sync.apply_appointment_changes(
            serializer.validated_data['changes'],
            client_id=serializer.validated_data.get('client_id'),
            allow_delete=RoleChoices.ADMIN in _user_role_names(request.user),
        )
        return Response(result, status=status.HTTP_200_OK)

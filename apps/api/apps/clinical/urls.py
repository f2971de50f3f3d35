"""
Clinical URLs - Patients, Visits, Appointments, appointment sync.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    AppointmentSyncView,
    AppointmentViewSet,
    PatientViewSet,
    VisitViewSet,
)

router = DefaultRouter()
router.register(r'patients', PatientViewSet, basename='patient')
router.register(r'visits', VisitViewSet, basename='visit')
router.register(r'appointments', AppointmentViewSet, basename='appointment')

urlpatterns = [
    path('sync/appointments/', AppointmentSyncView.as_view(), name='sync-appointments'),

    # Standard CRUD via router
    path('', include(router.urls)),
]

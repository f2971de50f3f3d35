"""
URL configuration for the clinic manager project.
"""
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)
from apps.core.observability.health import HealthzView, ReadyzView

urlpatterns = [
    # Health checks (no auth required)
    path('healthz', HealthzView.as_view(), name='healthz'),
    path('readyz', ReadyzView.as_view(), name='readyz'),

    # Admin (browser-rendered management pages)
    path('admin/', admin.site.urls),

    # Private API (authentication required)
    path('api/v1/', include('apps.core.urls')),      # JWT auth, clinics
    path('api/v1/', include('apps.authz.urls')),     # users, providers, auth/me
    path('api/v1/', include('apps.clinical.urls')),  # patients, visits, appointments, sync

    # API Schema
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/schema/swagger-ui/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/schema/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]

"""
Authz URLs - users, providers, current user.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import CurrentUserView, ProviderViewSet, UserViewSet

router = DefaultRouter()
router.register(r'users', UserViewSet, basename='user')
router.register(r'providers', ProviderViewSet, basename='provider')

urlpatterns = [
    path('auth/me/', CurrentUserView.as_view(), name='auth-me'),
    path('', include(router.urls)),
]

"""
Authz models: users (providers), roles, user roles.

Users are the application's providers. They belong to at most one clinic and
carry the same sync bookkeeping as every other synchronized table.
"""
import uuid
from django.db import models
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin

from apps.core.models import SyncRecord, SyncRecordQuerySet


class RoleChoices(models.TextChoices):
    ADMIN = 'admin', 'Admin'
    PROVIDER = 'provider', 'Provider'
    REGISTRAR = 'registrar', 'Registrar'


class UserManager(BaseUserManager.from_queryset(SyncRecordQuerySet)):
    """Email-based user manager with the live()/deleted() helpers."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin, SyncRecord):
    """
    Application user / provider.

    Fields:
    - id: UUID PK (v1)
    - email: unique, login
    - name: display name, copied into visits as provider_name
    - clinic: nullable FK -> clinics; blocks clinic soft-delete while live
    - is_active / is_staff: Django auth flags
    - sync bookkeeping (see SyncRecord)
    """
    email = models.EmailField(unique=True, max_length=255)
    name = models.CharField(max_length=255, blank=True, default='')
    clinic = models.ForeignKey(
        'core.Clinic',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='users'
    )
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        indexes = [
            models.Index(fields=['email'], name='idx_user_email'),
            models.Index(fields=['clinic', 'is_deleted'], name='idx_user_clinic_deleted'),
        ]

    def __str__(self):
        return self.email

    @property
    def role_names(self):
        return list(self.user_roles.values_list('role__name', flat=True))

    @property
    def role(self):
        """Primary role: admin wins over provider wins over registrar."""
        names = set(self.role_names)
        for choice in RoleChoices.values:
            if choice in names:
                return choice
        return None

    def set_role(self, role_name):
        """Replace the user's roles with ``role_name``."""
        role, _ = Role.objects.get_or_create(name=role_name)
        self.user_roles.exclude(role=role).delete()
        UserRole.objects.get_or_create(user=self, role=role)

    def soft_delete(self, save=True):
        super().soft_delete(save=False)
        self.is_active = False
        if save:
            self.save(update_fields=[
                'is_deleted', 'deleted_at', 'updated_at', 'last_modified', 'is_active'
            ])


class Role(models.Model):
    """
    System roles: admin | provider | registrar
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(
        max_length=50,
        unique=True,
        choices=RoleChoices.choices
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'auth_role'
        verbose_name = 'Role'
        verbose_name_plural = 'Roles'

    def __str__(self):
        return self.get_name_display()


class UserRole(models.Model):
    """Many-to-many relationship between users and roles."""
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='user_roles'
    )
    role = models.ForeignKey(
        Role,
        on_delete=models.CASCADE,
        related_name='user_roles'
    )

    class Meta:
        db_table = 'auth_user_role'
        verbose_name = 'User Role'
        verbose_name_plural = 'User Roles'
        unique_together = [('user', 'role')]
        indexes = [
            models.Index(fields=['user'], name='idx_user_role_user'),
            models.Index(fields=['role'], name='idx_user_role_role'),
        ]

    def __str__(self):
        return f"{self.user.email} - {self.role.name}"

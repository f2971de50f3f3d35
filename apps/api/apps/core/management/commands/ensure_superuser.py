"""
Management command to ensure superuser exists (for Docker startup).
"""
import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from apps.authz.models import RoleChoices


class Command(BaseCommand):
    help = 'Create superuser with the admin role if it does not exist'

    def handle(self, *args, **options):
        User = get_user_model()

        email = os.environ.get('DJANGO_SUPERUSER_EMAIL', 'admin@example.com')
        password = os.environ.get('DJANGO_SUPERUSER_PASSWORD', 'admin123dev')

        user = User.objects.filter(email=email).first()
        if user is None:
            user = User.objects.create_superuser(email=email, password=password, name='Administrator')
            self.stdout.write(
                self.style.SUCCESS(f'Superuser "{email}" created successfully')
            )
        else:
            self.stdout.write(
                self.style.WARNING(f'Superuser "{email}" already exists')
            )

        if RoleChoices.ADMIN not in user.role_names:
            user.set_role(RoleChoices.ADMIN)
            self.stdout.write(self.style.SUCCESS(f'Assigned admin role to "{email}"'))

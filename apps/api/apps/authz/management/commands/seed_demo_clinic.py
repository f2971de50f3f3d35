"""
Management command to create a demo clinic with one user per role.

Usage:
    python manage.py seed_demo_clinic

Idempotent. FOR DEVELOPMENT ONLY.
"""
from django.core.management.base import BaseCommand
from django.db import transaction

from apps.authz.models import Role, RoleChoices, User
from apps.core.models import Clinic

DEMO_CLINIC_NAME = 'Demo Clinic'

DEMO_USERS = [
    {'email': 'admin@example.com', 'name': 'Demo Admin', 'role': RoleChoices.ADMIN, 'is_staff': True},
    {'email': 'provider@example.com', 'name': 'Demo Provider', 'role': RoleChoices.PROVIDER},
    {'email': 'registrar@example.com', 'name': 'Demo Registrar', 'role': RoleChoices.REGISTRAR},
]
DEMO_PASSWORD = 'demo12345'


class Command(BaseCommand):
    help = 'Create a demo clinic and one demo user per role'

    @transaction.atomic
    def handle(self, *args, **options):
        for role_choice in RoleChoices.values:
            role, created = Role.objects.get_or_create(name=role_choice)
            if created:
                self.stdout.write(self.style.SUCCESS(f'  ✓ Created role: {role.name}'))

        clinic = Clinic.objects.live().filter(name=DEMO_CLINIC_NAME).first()
        if clinic is None:
            clinic = Clinic.objects.create(name=DEMO_CLINIC_NAME)
            self.stdout.write(self.style.SUCCESS(f'  ✓ Created clinic: {clinic.id}'))

        for user_data in DEMO_USERS:
            email = user_data['email']
            user = User.objects.filter(email=email).first()
            if user is None:
                user = User.objects.create_user(
                    email=email,
                    password=DEMO_PASSWORD,
                    name=user_data['name'],
                    clinic=clinic,
                    is_staff=user_data.get('is_staff', False),
                )
                self.stdout.write(self.style.SUCCESS(f'  ✓ Created user: {email}'))
            else:
                self.stdout.write(f'  - User exists: {email}')
            user.set_role(user_data['role'])

        self.stdout.write(self.style.SUCCESS('\n✓ Done'))

# Generated migration for clinical app - patients, visits, appointments

import uuid
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


def bookkeeping_fields():
    return [
        ('id', models.UUIDField(default=uuid.uuid1, editable=False, primary_key=True, serialize=False)),
        ('is_deleted', models.BooleanField(default=False)),
        ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
        ('updated_at', models.DateTimeField(default=django.utils.timezone.now)),
        ('last_modified', models.DateTimeField(default=django.utils.timezone.now)),
        ('server_created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
        ('deleted_at', models.DateTimeField(blank=True, null=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Patient',
            fields=bookkeeping_fields() + [
                ('given_name', models.CharField(blank=True, default='', max_length=255)),
                ('surname', models.CharField(blank=True, default='', max_length=255)),
                ('date_of_birth', models.DateField(blank=True, null=True)),
                ('sex', models.CharField(blank=True, max_length=20, null=True)),
                ('citizenship', models.CharField(blank=True, default='', max_length=100)),
                ('phone', models.CharField(blank=True, default='', max_length=50)),
                ('government_id', models.CharField(blank=True, default='', max_length=100)),
                ('external_patient_id', models.CharField(blank=True, default='', max_length=100)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('primary_clinic', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='patients', to='core.clinic')),
            ],
            options={
                'verbose_name': 'Patient',
                'verbose_name_plural': 'Patients',
                'db_table': 'patients',
            },
        ),
        migrations.CreateModel(
            name='Visit',
            fields=bookkeeping_fields() + [
                ('provider_name', models.CharField(blank=True, default='', max_length=255)),
                ('check_in_timestamp', models.DateTimeField(blank=True, null=True)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('clinic', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='visits', to='core.clinic')),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='visits', to='clinical.patient')),
                ('provider', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='visits', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Visit',
                'verbose_name_plural': 'Visits',
                'db_table': 'visits',
            },
        ),
        migrations.CreateModel(
            name='Appointment',
            fields=bookkeeping_fields() + [
                ('current_visit_id', models.UUIDField()),
                ('fulfilled_visit_id', models.UUIDField(blank=True, null=True)),
                ('timestamp', models.DateTimeField()),
                ('duration', models.PositiveIntegerField(default=0)),
                ('reason', models.TextField(blank=True, default='')),
                ('notes', models.TextField(blank=True, default='')),
                ('status', models.CharField(
                    choices=[
                        ('pending', 'Pending'),
                        ('confirmed', 'Confirmed'),
                        ('cancelled', 'Cancelled'),
                        ('completed', 'Completed'),
                        ('checked_in', 'Checked In'),
                    ],
                    default='pending',
                    max_length=20
                )),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('clinic', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='appointments', to='core.clinic')),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='appointments', to='clinical.patient')),
                ('provider', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='provider_appointments', to=settings.AUTH_USER_MODEL)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='booked_appointments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Appointment',
                'verbose_name_plural': 'Appointments',
                'db_table': 'appointments',
            },
        ),
        migrations.AddIndex(
            model_name='patient',
            index=models.Index(fields=['surname', 'given_name'], name='idx_patient_name'),
        ),
        migrations.AddIndex(
            model_name='patient',
            index=models.Index(fields=['primary_clinic'], name='idx_patient_clinic'),
        ),
        migrations.AddIndex(
            model_name='patient',
            index=models.Index(fields=['is_deleted'], name='idx_patient_deleted'),
        ),
        migrations.AddIndex(
            model_name='visit',
            index=models.Index(fields=['patient'], name='idx_visit_patient'),
        ),
        migrations.AddIndex(
            model_name='visit',
            index=models.Index(fields=['clinic'], name='idx_visit_clinic'),
        ),
        migrations.AddIndex(
            model_name='visit',
            index=models.Index(fields=['is_deleted'], name='idx_visit_deleted'),
        ),
        migrations.AddIndex(
            model_name='appointment',
            index=models.Index(fields=['patient'], name='idx_appointment_patient'),
        ),
        migrations.AddIndex(
            model_name='appointment',
            index=models.Index(fields=['provider'], name='idx_appointment_provider'),
        ),
        migrations.AddIndex(
            model_name='appointment',
            index=models.Index(fields=['clinic'], name='idx_appointment_clinic'),
        ),
        migrations.AddIndex(
            model_name='appointment',
            index=models.Index(fields=['timestamp'], name='idx_appointment_timestamp'),
        ),
        migrations.AddIndex(
            model_name='appointment',
            index=models.Index(fields=['status'], name='idx_appointment_status'),
        ),
        migrations.AddIndex(
            model_name='appointment',
            index=models.Index(fields=['is_deleted'], name='idx_appointment_deleted'),
        ),
    ]

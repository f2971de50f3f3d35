from django.contrib import admin
from .models import Patient, Visit, Appointment


class SyncRecordAdmin(admin.ModelAdmin):
    """Hard deletes are disabled; use the soft delete action."""
    readonly_fields = ['id', 'server_created_at', 'last_modified', 'deleted_at']
    actions = ['soft_delete_selected']

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description='Soft delete selected rows')
    def soft_delete_selected(self, request, queryset):
        for obj in queryset.filter(is_deleted=False):
            obj.soft_delete()


@admin.register(Patient)
class PatientAdmin(SyncRecordAdmin):
    list_display = ['given_name', 'surname', 'date_of_birth', 'phone', 'primary_clinic', 'is_deleted']
    list_filter = ['sex', 'is_deleted', 'primary_clinic']
    search_fields = ['given_name', 'surname', 'phone', 'government_id', 'external_patient_id']

    fieldsets = (
        ('Basic Info', {
            'fields': ('id', 'given_name', 'surname', 'date_of_birth', 'sex', 'citizenship')
        }),
        ('Identifiers', {
            'fields': ('phone', 'government_id', 'external_patient_id', 'primary_clinic')
        }),
        ('Metadata', {
            'fields': ('metadata',)
        }),
        ('Sync', {
            'fields': ('is_deleted', 'created_at', 'updated_at', 'last_modified', 'server_created_at', 'deleted_at')
        }),
    )


@admin.register(Visit)
class VisitAdmin(SyncRecordAdmin):
    list_display = ['id', 'patient', 'clinic', 'provider_name', 'check_in_timestamp', 'created_at', 'is_deleted']
    list_filter = ['is_deleted', 'clinic']
    search_fields = ['provider_name', 'patient__given_name', 'patient__surname']
    raw_id_fields = ['patient', 'provider']


@admin.register(Appointment)
class AppointmentAdmin(SyncRecordAdmin):
    list_display = ['timestamp', 'patient', 'provider', 'clinic', 'status', 'duration', 'is_deleted']
    list_filter = ['status', 'is_deleted', 'clinic']
    search_fields = ['patient__given_name', 'patient__surname', 'reason']
    raw_id_fields = ['patient', 'provider', 'user']
    date_hierarchy = 'timestamp'

from django.contrib import admin

from .models import Clinic
from .services import soft_delete_clinic
from .exceptions import ClinicHasMembersError


@admin.register(Clinic)
class ClinicAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_deleted', 'updated_at', 'last_modified']
    list_filter = ['is_deleted']
    search_fields = ['name']
    readonly_fields = ['id', 'server_created_at', 'last_modified', 'deleted_at']
    actions = ['soft_delete_selected']

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description='Soft delete selected clinics')
    def soft_delete_selected(self, request, queryset):
        for clinic in queryset.filter(is_deleted=False):
            try:
                soft_delete_clinic(str(clinic.id))
            except ClinicHasMembersError as e:
                self.message_user(request, str(e), level='error')

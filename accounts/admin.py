"""
Django admin registrations for the accounts models.

Accounts can be inspected from ``/admin/``; lifecycle changes should go
through the API so that they are audited.  Audit entries are exposed
read-only.
"""

from django.contrib import admin

from .models import User, DoctorProfile, PatientProfile, CatalogEntry, AuditEntry


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'national_id', 'is_active', 'deactivated_at')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'first_name', 'last_name', 'national_id', 'email')
    # lifecycle fields change only through the audited services
    readonly_fields = (
        'role', 'is_active', 'deactivation_reason', 'deactivation_notes', 'deactivated_by',
        'deactivated_at', 'reactivated_by', 'reactivated_at', 'created_by',
    )


@admin.register(DoctorProfile)
class DoctorProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'license_number', 'specialization_code', 'governorate_code')
    list_filter = ('specialization_code', 'governorate_code')
    search_fields = ('user__username', 'user__first_name', 'user__last_name', 'license_number')


@admin.register(PatientProfile)
class PatientProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'gender', 'date_of_birth', 'governorate_code')
    search_fields = ('user__username', 'user__first_name', 'user__last_name', 'phone_number')


@admin.register(CatalogEntry)
class CatalogEntryAdmin(admin.ModelAdmin):
    list_display = ('catalog', 'code', 'name_en', 'name_ar', 'version', 'sort_order')
    list_filter = ('catalog', 'version')
    search_fields = ('code', 'name_en', 'name_ar')


@admin.register(AuditEntry)
class AuditEntryAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'action_code', 'admin_name', 'target_role', 'target_id')
    list_filter = ('action_code', 'target_role')
    search_fields = ('description', 'admin_name')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

from django.contrib import admin

from .models import MilestoneRecord, VendorAssignment


@admin.register(MilestoneRecord)
class MilestoneRecordAdmin(admin.ModelAdmin):
    list_display = ("customer", "milestone_key", "ordinal_index", "status", "completed_at", "updated_by_role")
    list_filter = ("status", "milestone_key")
    search_fields = ("customer__name", "customer__phone")
    readonly_fields = [f.name for f in MilestoneRecord._meta.fields]
    list_select_related = ("customer",)

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(VendorAssignment)
class VendorAssignmentAdmin(admin.ModelAdmin):
    list_display = ("customer", "vendor", "job_role", "journey_stage", "is_active", "created_at")
    list_filter = ("job_role", "journey_stage", "is_active")
    search_fields = ("customer__name", "vendor__name")
    readonly_fields = ("id", "created_at", "updated_at", "superseded_at")
    list_select_related = ("customer", "vendor")

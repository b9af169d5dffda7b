from django.contrib import admin

from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "phone",
        "state",
        "panel_type",
        "proposed_capacity",
        "status",
        "source",
        "ddp",
        "created_at",
    )
    list_filter = ("status", "panel_type", "source", "state")
    search_fields = ("name", "phone", "email", "district")
    readonly_fields = ("id", "created_at", "updated_at")
    list_select_related = ("ddp",)
    raw_id_fields = ("ddp",)
    date_hierarchy = "created_at"

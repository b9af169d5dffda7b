from django.contrib import admin

from .models import Vendor


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = ("name", "vendor_type", "state", "district", "status", "created_at")
    list_filter = ("vendor_type", "status", "state")
    search_fields = ("name", "phone", "email")
    readonly_fields = ("id", "created_at", "updated_at")
    list_editable = ("status",)

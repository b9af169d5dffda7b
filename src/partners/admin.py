from django.contrib import admin

from .models import Partner


@admin.register(Partner)
class PartnerAdmin(admin.ModelAdmin):
    list_display = ("name", "role", "parent", "state", "district", "status", "created_at")
    list_filter = ("role", "status", "state")
    search_fields = ("name", "phone", "email")
    readonly_fields = ("id", "created_at", "updated_at")
    raw_id_fields = ("parent", "user")

from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("title", "event_type", "partner", "customer", "is_read", "emailed_at", "created_at")
    list_filter = ("event_type", "is_read")
    search_fields = ("title", "message", "partner__name", "customer__name")
    readonly_fields = ("id", "created_at", "updated_at", "dedupe_key", "payload")
    list_select_related = ("partner", "customer")

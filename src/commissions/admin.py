from django.contrib import admin

from .models import Commission, IncentiveTarget


@admin.register(Commission)
class CommissionAdmin(admin.ModelAdmin):
    list_display = (
        "partner",
        "partner_type",
        "source",
        "customer",
        "capacity_kw",
        "commission_amount",
        "status",
        "created_at",
    )
    list_filter = ("source", "status", "partner_type")
    search_fields = ("partner__name", "customer__name", "reference")
    readonly_fields = ("id", "created_at", "updated_at", "rate_version", "incentive_target")
    list_select_related = ("partner", "customer")
    date_hierarchy = "created_at"


@admin.register(IncentiveTarget)
class IncentiveTargetAdmin(admin.ModelAdmin):
    list_display = (
        "partner",
        "partner_type",
        "month",
        "year",
        "achieved_installations",
        "target_installations",
        "achieved_capacity_kw",
        "target_capacity_kw",
        "status",
    )
    list_filter = ("status", "partner_type", "year", "month")
    search_fields = ("partner__name",)
    readonly_fields = ("id", "created_at", "updated_at", "achieved_at")
    list_select_related = ("partner",)

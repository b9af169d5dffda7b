"""Serializers for the journey and commission API."""
from rest_framework import serializers

from commissions.models import Commission, IncentiveTarget
from customers.models import Customer
from journey import catalog
from journey.models import MilestoneRecord, VendorAssignment
from partners.models import Partner
from vendors.models import Vendor


# ---------------------------------------------------------------------------
# Directory
# ---------------------------------------------------------------------------

class CustomerSerializer(serializers.ModelSerializer):
    ddp_name = serializers.CharField(source="ddp.name", read_only=True, default=None)

    class Meta:
        model = Customer
        fields = [
            "id", "name", "phone", "email", "district", "state",
            "panel_type", "proposed_capacity", "status", "source",
            "ddp", "ddp_name", "created_at",
        ]
        read_only_fields = fields


class PartnerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Partner
        fields = ["id", "name", "phone", "email", "role", "parent", "state", "district", "status"]
        read_only_fields = fields


class VendorSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vendor
        fields = ["id", "name", "phone", "email", "vendor_type", "state", "district", "status"]
        read_only_fields = fields


# ---------------------------------------------------------------------------
# Journey
# ---------------------------------------------------------------------------

class MilestoneRecordSerializer(serializers.ModelSerializer):
    label = serializers.SerializerMethodField()
    description = serializers.SerializerMethodField()
    vendor_gate = serializers.SerializerMethodField()

    class Meta:
        model = MilestoneRecord
        fields = [
            "id", "milestone_key", "ordinal_index", "label", "description",
            "vendor_gate", "status", "completed_at", "notes",
            "updated_by_role", "updated_by_id",
        ]
        read_only_fields = fields

    def get_label(self, obj):
        return obj.definition.label

    def get_description(self, obj):
        return obj.definition.description

    def get_vendor_gate(self, obj):
        gate = obj.definition.vendor_gate
        if gate is None:
            return None
        return {"job_role": gate.job_role, "journey_stage": gate.journey_stage}


class JourneyProgressSerializer(serializers.Serializer):
    completed = serializers.IntegerField()
    total = serializers.IntegerField()
    percent = serializers.IntegerField()
    next_milestone = serializers.CharField(allow_null=True)
    is_complete = serializers.BooleanField()


class CompleteMilestoneSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    vendor_id = serializers.UUIDField(required=False, allow_null=True, default=None)


class VendorAssignmentSerializer(serializers.ModelSerializer):
    vendor = VendorSerializer(read_only=True)

    class Meta:
        model = VendorAssignment
        fields = [
            "id", "vendor", "job_role", "journey_stage", "notes",
            "is_active", "superseded_at", "assigned_by_role", "created_at",
        ]
        read_only_fields = fields


class VendorAssignmentCreateSerializer(serializers.Serializer):
    vendor_id = serializers.UUIDField()
    job_role = serializers.ChoiceField(choices=catalog.JOB_ROLES)
    journey_stage = serializers.ChoiceField(choices=catalog.JOURNEY_STAGES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


# ---------------------------------------------------------------------------
# Commissions
# ---------------------------------------------------------------------------

class CommissionSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True, default=None)

    class Meta:
        model = Commission
        fields = [
            "id", "partner", "partner_type", "customer", "customer_name",
            "source", "panel_type", "capacity_kw", "units",
            "commission_amount", "status", "paid_at", "notes",
            "reference", "rate_version", "created_at",
        ]
        read_only_fields = fields


class CommissionSummarySerializer(serializers.Serializer):
    total_earned = serializers.DecimalField(max_digits=14, decimal_places=2)
    pending_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    paid_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    installation_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    inverter_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    bonus_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    installation_count = serializers.IntegerField()
    this_month_amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class IncentiveTargetSerializer(serializers.ModelSerializer):
    installations_met = serializers.BooleanField(read_only=True)
    capacity_met = serializers.BooleanField(read_only=True)

    class Meta:
        model = IncentiveTarget
        fields = [
            "id", "partner", "partner_type", "month", "year",
            "target_installations", "target_capacity_kw",
            "achieved_installations", "achieved_capacity_kw",
            "installations_met", "capacity_met",
            "bonus_amount", "status", "achieved_at",
        ]
        read_only_fields = fields


class InverterSaleSerializer(serializers.Serializer):
    units_sold = serializers.IntegerField(min_value=1)
    reference = serializers.CharField(required=False, allow_blank=True, default="", max_length=100)

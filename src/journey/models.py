"""Per-customer journey state: milestone records and vendor assignments."""
from django.db import models
from django.db.models import Q

from core.models import TimeStampedModel

from . import catalog


class MilestoneRecord(TimeStampedModel):
    """Progress of one customer on one catalog step. Never deleted."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="milestones",
    )
    milestone_key = models.CharField(max_length=50)
    ordinal_index = models.PositiveSmallIntegerField()
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    completed_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    updated_by_role = models.CharField(max_length=20, blank=True, default="")
    updated_by_id = models.CharField(max_length=64, blank=True, default="")

    class Meta:
        ordering = ["customer", "ordinal_index"]
        constraints = [
            models.UniqueConstraint(
                fields=["customer", "milestone_key"],
                name="uniq_milestone_per_customer",
            ),
        ]
        indexes = [
            models.Index(fields=["customer", "ordinal_index"], name="milestone_customer_ord_idx"),
        ]

    def __str__(self):
        return f"{self.customer_id} / {self.milestone_key} ({self.status})"

    @property
    def definition(self) -> catalog.MilestoneDefinition:
        return catalog.get_definition(self.milestone_key)

    @property
    def is_completed(self) -> bool:
        return self.status == self.Status.COMPLETED


class VendorAssignment(TimeStampedModel):
    """A vendor engaged for a customer in a given job role.

    Re-assigning a job role supersedes the previous row (``is_active=False``)
    rather than editing it, so the history stays queryable.
    """

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="vendor_assignments",
    )
    vendor = models.ForeignKey(
        "vendors.Vendor",
        on_delete=models.PROTECT,
        related_name="assignments",
    )
    job_role = models.CharField(max_length=40)
    journey_stage = models.CharField(max_length=30)
    notes = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)
    superseded_at = models.DateTimeField(null=True, blank=True)
    assigned_by_role = models.CharField(max_length=20, blank=True, default="")
    assigned_by_id = models.CharField(max_length=64, blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["customer", "job_role"],
                condition=Q(is_active=True),
                name="uniq_active_assignment_per_role",
            ),
        ]

    def __str__(self):
        return f"{self.vendor} -> {self.customer_id} [{self.job_role}]"

"""Commission ledger and monthly incentive targets."""
from decimal import Decimal

from django.db import models
from django.db.models import Q

from core.models import TimeStampedModel


class PartnerType(models.TextChoices):
    BDP = "bdp", "BDP"
    DDP = "ddp", "DDP"


class IncentiveTarget(TimeStampedModel):
    """Monthly quota for one partner; meeting both sub-quotas pays one bonus."""

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        ACHIEVED = "achieved", "Achieved"
        EXPIRED = "expired", "Expired"

    partner = models.ForeignKey(
        "partners.Partner",
        on_delete=models.PROTECT,
        related_name="incentive_targets",
    )
    partner_type = models.CharField(max_length=3, choices=PartnerType.choices)
    month = models.PositiveSmallIntegerField()
    year = models.PositiveSmallIntegerField()
    target_installations = models.PositiveIntegerField()
    target_capacity_kw = models.DecimalField(max_digits=9, decimal_places=2)
    achieved_installations = models.PositiveIntegerField(default=0)
    achieved_capacity_kw = models.DecimalField(max_digits=9, decimal_places=2, default=Decimal("0.00"))
    bonus_amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True,
    )
    achieved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-year", "-month"]
        constraints = [
            models.UniqueConstraint(
                fields=["partner", "partner_type", "month", "year"],
                name="uniq_incentive_target_period",
            ),
        ]

    def __str__(self):
        return f"{self.partner} {self.month:02d}/{self.year} ({self.status})"

    @property
    def installations_met(self) -> bool:
        return self.achieved_installations >= self.target_installations

    @property
    def capacity_met(self) -> bool:
        return self.achieved_capacity_kw >= self.target_capacity_kw


class Commission(TimeStampedModel):
    """One ledger line. Created ``pending``; payouts move it further."""

    class Source(models.TextChoices):
        INSTALLATION = "installation", "Installation"
        INVERTER = "inverter", "Inverter sale"
        BONUS = "bonus", "Incentive bonus"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        PAID = "paid", "Paid"

    partner = models.ForeignKey(
        "partners.Partner",
        on_delete=models.PROTECT,
        related_name="commissions",
    )
    partner_type = models.CharField(max_length=3, choices=PartnerType.choices)
    customer = models.ForeignKey(
        "customers.Customer",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="commissions",
    )
    source = models.CharField(max_length=15, choices=Source.choices, db_index=True)
    panel_type = models.CharField(max_length=10, blank=True, default="")
    capacity_kw = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True)
    units = models.PositiveIntegerField(default=0)
    commission_amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    paid_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    reference = models.CharField(max_length=100, blank=True, default="")
    rate_version = models.CharField(max_length=20, blank=True, default="")
    incentive_target = models.ForeignKey(
        IncentiveTarget,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="bonuses",
    )

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["partner", "customer"],
                condition=Q(source="installation"),
                name="uniq_installation_commission",
            ),
            models.UniqueConstraint(
                fields=["incentive_target"],
                condition=Q(source="bonus"),
                name="uniq_bonus_per_target",
            ),
        ]
        indexes = [
            models.Index(fields=["partner", "status"], name="commission_partner_status_idx"),
        ]

    def __str__(self):
        return f"{self.partner} {self.get_source_display()} {self.commission_amount}"

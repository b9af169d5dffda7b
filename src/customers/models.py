"""Customer record as consumed by the installation journey."""
from django.db import models

from core.models import TimeStampedModel


class Customer(TimeStampedModel):
    """A rooftop-solar customer, usually brought in by a DDP."""

    class PanelType(models.TextChoices):
        DCR = "dcr", "DCR"
        NON_DCR = "non_dcr", "Non-DCR"

    class Status(models.TextChoices):
        # Coarse pipeline status, operator-driven and independent of the journey.
        PENDING = "pending", "Pending"
        VERIFIED = "verified", "Verified"
        APPROVED = "approved", "Approved"
        INSTALLATION_SCHEDULED = "installation_scheduled", "Installation scheduled"
        COMPLETED = "completed", "Completed"

    class Source(models.TextChoices):
        PARTNER = "partner", "Partner"
        WEBSITE_DIRECT = "website_direct", "Website (direct)"

    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, db_index=True)
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")
    district = models.CharField(max_length=100, blank=True, default="")
    state = models.CharField(max_length=100, blank=True, default="")
    panel_type = models.CharField(
        max_length=10,
        choices=PanelType.choices,
        default=PanelType.DCR,
    )
    proposed_capacity = models.DecimalField(
        "proposed capacity (kW)",
        max_digits=7,
        decimal_places=2,
        null=True,
        blank=True,
    )
    status = models.CharField(
        max_length=30,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    source = models.CharField(
        max_length=20,
        choices=Source.choices,
        default=Source.PARTNER,
    )
    ddp = models.ForeignKey(
        "partners.Partner",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="customers",
        verbose_name="owning DDP",
    )

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.name or self.phone

"""Partner directory (BDP / DDP tiers)."""
from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class Partner(TimeStampedModel):
    """A commission-earning partner. A DDP may sit under a parent BDP."""

    class Role(models.TextChoices):
        BDP = "bdp", "Business Development Partner"
        DDP = "ddp", "District Development Partner"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="partner_profile",
    )
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    role = models.CharField(max_length=3, choices=Role.choices, db_index=True)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="children",
        help_text="Parent BDP of a DDP.",
    )
    state = models.CharField(max_length=100, blank=True, default="")
    district = models.CharField(max_length=100, blank=True, default="")
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.get_role_display()})"

    @property
    def parent_bdp(self):
        """Parent partner when it is a BDP, else ``None``."""
        if self.parent_id and self.parent.role == self.Role.BDP:
            return self.parent
        return None

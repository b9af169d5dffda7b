"""Third-party vendor directory (read-only from the journey's point of view)."""
from django.db import models

from core.models import TimeStampedModel


class VendorQuerySet(models.QuerySet):
    def approved(self):
        return self.filter(status=Vendor.Status.APPROVED)

    def of_type(self, vendor_type):
        return self.filter(vendor_type=vendor_type)


class Vendor(TimeStampedModel):
    """A facilitator or supplier the operator can assign to a customer."""

    class VendorType(models.TextChoices):
        DISCOM_NET_METERING = "discom_net_metering", "Discom Net Metering"
        BANK_LOAN_LIAISON = "bank_loan_liaison", "Bank Loan Liaison"
        LOGISTIC = "logistic", "Logistic"
        ELECTRICAL = "electrical", "Electrical"
        SOLAR_INSTALLATION = "solar_installation", "Solar Installation"
        SOLAR_PANEL_SUPPLIER = "solar_panel_supplier", "Solar Panel Supplier"
        INVERTER_SUPPLIER = "inverter_supplier", "Inverter Supplier"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    vendor_type = models.CharField(max_length=40, choices=VendorType.choices, db_index=True)
    state = models.CharField(max_length=100, blank=True, default="")
    district = models.CharField(max_length=100, blank=True, default="")
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )

    objects = VendorQuerySet.as_manager()

    class Meta:
        # Directory order: registration order.
        ordering = ["created_at", "name"]

    def __str__(self):
        return f"{self.name} ({self.get_vendor_type_display()})"

    @property
    def is_approved(self):
        return self.status == self.Status.APPROVED

"""In-app notifications produced from journey and commission events."""
from django.db import models

from core.models import TimeStampedModel


class Notification(TimeStampedModel):
    """A message for one partner or one customer.

    ``dedupe_key`` identifies (event, object, audience) so that a delivery
    retried by Celery, or replayed inline, never creates a second row.
    """

    class EventType(models.TextChoices):
        MILESTONE_COMPLETED = "milestone_completed", "Milestone completed"
        VENDOR_ASSIGNED = "vendor_assigned", "Vendor assigned"
        COMMISSION_EARNED = "commission_earned", "Commission earned"
        INCENTIVE_ACHIEVED = "incentive_achieved", "Incentive achieved"

    partner = models.ForeignKey(
        "partners.Partner",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    customer = models.ForeignKey(
        "customers.Customer",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    event_type = models.CharField(max_length=30, choices=EventType.choices, db_index=True)
    title = models.CharField(max_length=200)
    message = models.TextField()
    payload = models.JSONField(default=dict, blank=True)
    dedupe_key = models.CharField(max_length=150, unique=True)

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    emailed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"[{self.get_event_type_display()}] {self.title}"

    @property
    def recipient_email(self) -> str:
        if self.partner_id:
            return self.partner.email
        if self.customer_id:
            return self.customer.email
        return ""

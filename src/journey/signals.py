"""Journey signals.

``milestone_completed`` and ``vendor_assigned`` are sent inside the
transaction that made the change. Receivers that do follow-up writes
(commissions) join that transaction; receivers that talk to the outside
world (notifications) must defer their work with ``transaction.on_commit``.
"""

from django.db.models.signals import post_save
from django.dispatch import Signal, receiver


# kwargs: record, customer_id, actor
milestone_completed = Signal()

# kwargs: assignment, actor
vendor_assigned = Signal()


@receiver(post_save, sender="customers.Customer")
def start_journey_for_new_customer(sender, instance, created, raw=False, **kwargs):
    """Seed the pending milestone records when a customer is created."""
    if not created or raw:
        return
    from journey.services import initialize_journey

    initialize_journey(instance.pk)

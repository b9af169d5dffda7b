"""Commission signals and the journey hook that awards installation commissions."""

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.dispatch import Signal, receiver

from journey import catalog
from journey.signals import milestone_completed


# kwargs: commission
commission_earned = Signal()

# kwargs: target, bonus
incentive_achieved = Signal()


def trigger_milestone_key() -> str:
    """Milestone whose completion pays installation commissions."""
    key = getattr(settings, "COMMISSION_TRIGGER_MILESTONE", "") or catalog.terminal_definition().key
    if not catalog.is_known(key):
        raise ImproperlyConfigured(f"COMMISSION_TRIGGER_MILESTONE '{key}' is not a journey milestone.")
    return key


@receiver(milestone_completed)
def award_commissions_on_trigger(sender, record, customer_id, **kwargs):
    # Runs inside the completion transaction: a failure here undoes the completion.
    if record.milestone_key != trigger_milestone_key():
        return
    from commissions.services import award_installation_commissions
    from customers.models import Customer

    customer = Customer.objects.select_related("ddp", "ddp__parent").get(pk=customer_id)
    award_installation_commissions(customer)

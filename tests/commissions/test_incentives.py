from datetime import date
from decimal import Decimal

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import IntegrityError
from django.utils import timezone

from commissions.incentives import current_target, expire_past_targets, targets_for_partner
from commissions.models import Commission, IncentiveTarget
from commissions.services import record_bonus, record_installation_commission
from commissions.signals import incentive_achieved


def _install(make_customer, partner, capacity, panel_type="dcr"):
    customer = make_customer(proposed_capacity=Decimal(capacity), panel_type=panel_type)
    return record_installation_commission(customer.pk, partner.pk, partner.role, panel_type, Decimal(capacity))


def _target(partner):
    today = timezone.localdate()
    return IncentiveTarget.objects.get(partner=partner, month=today.month, year=today.year)


@pytest.mark.django_db
class TestIncentiveAggregation:
    def test_first_installation_opens_target_with_defaults(self, make_customer, ddp):
        _install(make_customer, ddp, "3")

        target = _target(ddp)
        assert target.partner_type == "ddp"
        assert target.target_installations == 5
        assert target.target_capacity_kw == Decimal("15")
        assert target.bonus_amount == Decimal("5000")
        assert target.achieved_installations == 1
        assert target.achieved_capacity_kw == Decimal("3")
        assert target.status == IncentiveTarget.Status.ACTIVE

    def test_both_thresholds_met_awards_one_bonus(self, make_customer, ddp):
        for _ in range(5):
            _install(make_customer, ddp, "3")

        target = _target(ddp)
        assert target.achieved_installations == 5
        assert target.achieved_capacity_kw == Decimal("15")
        assert target.status == IncentiveTarget.Status.ACHIEVED
        assert target.achieved_at is not None

        bonuses = Commission.objects.filter(partner=ddp, source=Commission.Source.BONUS)
        assert bonuses.count() == 1
        bonus = bonuses.get()
        assert bonus.commission_amount == Decimal("5000")
        assert bonus.incentive_target == target
        assert bonus.status == Commission.Status.PENDING
        assert bonus.notes == f"Monthly target bonus for {target.month}/{target.year}"

    def test_installation_count_alone_is_not_enough(self, make_customer, ddp):
        for _ in range(5):
            _install(make_customer, ddp, "2")

        target = _target(ddp)
        assert target.installations_met and not target.capacity_met
        assert target.status == IncentiveTarget.Status.ACTIVE
        assert not Commission.objects.filter(source="bonus").exists()

    def test_capacity_alone_is_not_enough(self, make_customer, ddp):
        _install(make_customer, ddp, "8")
        _install(make_customer, ddp, "9")

        target = _target(ddp)
        assert target.capacity_met and not target.installations_met
        assert target.status == IncentiveTarget.Status.ACTIVE
        assert not Commission.objects.filter(source="bonus").exists()

    def test_no_second_bonus_after_achieved(self, make_customer, ddp):
        for _ in range(6):
            _install(make_customer, ddp, "3")

        target = _target(ddp)
        assert target.achieved_installations == 6
        assert target.status == IncentiveTarget.Status.ACHIEVED
        assert Commission.objects.filter(source="bonus").count() == 1

    def test_duplicate_commission_does_not_count_twice(self, customer, ddp):
        record_installation_commission(customer.pk, ddp.pk, "ddp", "dcr", Decimal("3"))
        record_installation_commission(customer.pk, ddp.pk, "ddp", "dcr", Decimal("3"))

        assert _target(ddp).achieved_installations == 1

    def test_bdp_tracks_its_own_target(self, make_customer, ddp, bdp, complete_journey):
        complete_journey(make_customer())

        assert _target(ddp).achieved_installations == 1
        bdp_target = _target(bdp)
        assert bdp_target.partner_type == "bdp"
        assert bdp_target.achieved_installations == 1

    def test_incentive_achieved_signal(self, make_customer, ddp):
        received = []

        def handler(sender, target, bonus, **kwargs):
            received.append((target.pk, bonus.commission_amount))

        incentive_achieved.connect(handler)
        try:
            for _ in range(5):
                _install(make_customer, ddp, "3")
        finally:
            incentive_achieved.disconnect(handler)

        assert received == [(_target(ddp).pk, Decimal("5000"))]

    def test_concurrent_achievement_keeps_a_single_bonus(self, make_customer, ddp, monkeypatch):
        for _ in range(4):
            _install(make_customer, ddp, "3")
        real_refresh = IncentiveTarget.refresh_from_db
        raced = []

        def refresh_then_lose_race(target, *args, **kwargs):
            real_refresh(target, *args, **kwargs)
            if target.achieved_installations == 5 and not raced:
                raced.append(target.pk)
                # A concurrent request flips the target and pays its bonus first.
                IncentiveTarget.objects.filter(pk=target.pk).update(status=IncentiveTarget.Status.ACHIEVED)
                record_bonus(ddp.pk, "ddp", Decimal("5000"), incentive_target=target)

        monkeypatch.setattr(IncentiveTarget, "refresh_from_db", refresh_then_lose_race)
        _install(make_customer, ddp, "3")
        monkeypatch.undo()

        assert raced
        assert _target(ddp).status == IncentiveTarget.Status.ACHIEVED
        assert Commission.objects.filter(source=Commission.Source.BONUS).count() == 1

    def test_one_bonus_per_target_in_the_database(self, ddp):
        target = current_target(ddp.pk, "ddp")
        record_bonus(ddp.pk, "ddp", Decimal("5000"), incentive_target=target)

        with pytest.raises(IntegrityError):
            record_bonus(ddp.pk, "ddp", Decimal("5000"), incentive_target=target)

        assert Commission.objects.filter(incentive_target=target).count() == 1

    def test_custom_defaults(self, make_customer, ddp, settings):
        from commissions import rates

        settings.INCENTIVE_DEFAULTS = {
            "target_installations": 1,
            "target_capacity_kw": "3",
            "bonus_amount": "750",
        }
        rates.get_incentive_defaults.cache_clear()
        try:
            _install(make_customer, ddp, "3")
        finally:
            rates.get_incentive_defaults.cache_clear()

        assert Commission.objects.get(source="bonus").commission_amount == Decimal("750")


@pytest.mark.django_db
class TestIncentiveQueries:
    def test_current_target_is_opened_on_read(self, ddp):
        target = current_target(ddp.pk, "ddp")

        assert target.achieved_installations == 0
        assert target.status == IncentiveTarget.Status.ACTIVE
        assert current_target(ddp.pk, "ddp").pk == target.pk

    def test_targets_for_partner_newest_first(self, ddp):
        current_target(ddp.pk, "ddp", today=date(2024, 1, 10))
        current_target(ddp.pk, "ddp", today=date(2024, 3, 10))

        periods = [(t.year, t.month) for t in targets_for_partner(ddp.pk)]
        assert periods == [(2024, 3), (2024, 1)]

    def test_expire_past_targets(self, ddp):
        old = current_target(ddp.pk, "ddp", today=date(2023, 12, 1))
        last_month = current_target(ddp.pk, "ddp", today=date(2024, 2, 1))
        this_month = current_target(ddp.pk, "ddp", today=date(2024, 3, 1))
        achieved = current_target(ddp.pk, "bdp", today=date(2024, 1, 1))
        IncentiveTarget.objects.filter(pk=achieved.pk).update(status=IncentiveTarget.Status.ACHIEVED)

        assert expire_past_targets(today=date(2024, 3, 15)) == 2

        statuses = {t.pk: t.status for t in IncentiveTarget.objects.all()}
        assert statuses[old.pk] == "expired"
        assert statuses[last_month.pk] == "expired"
        assert statuses[this_month.pk] == "active"
        assert statuses[achieved.pk] == "achieved"

    def test_expire_command(self, ddp):
        stale = current_target(ddp.pk, "ddp", today=date(2024, 1, 1))

        call_command("expire_incentive_targets", "--today", "2024-02-01")

        stale.refresh_from_db()
        assert stale.status == IncentiveTarget.Status.EXPIRED

    def test_expire_command_rejects_bad_date(self):
        with pytest.raises(CommandError):
            call_command("expire_incentive_targets", "--today", "01/02/2024")

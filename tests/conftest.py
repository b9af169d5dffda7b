from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from customers.models import Customer
from journey import catalog
from journey.services import complete_milestone
from partners.models import Partner
from vendors.models import Vendor

User = get_user_model()


@pytest.fixture
def operator_user(db):
    return User.objects.create_user(
        username="operator",
        email="operator@test.com",
        password="testpass123",
        is_staff=True,
    )


@pytest.fixture
def partner_user(db):
    return User.objects.create_user(
        username="ddp-user",
        email="ddp-user@test.com",
        password="testpass123",
    )


@pytest.fixture
def bdp(db):
    return Partner.objects.create(
        name="Patna BDP",
        email="bdp@test.com",
        role=Partner.Role.BDP,
        state="Bihar",
        status=Partner.Status.APPROVED,
    )


@pytest.fixture
def ddp(db, bdp, partner_user):
    return Partner.objects.create(
        name="Gaya DDP",
        email="ddp@test.com",
        role=Partner.Role.DDP,
        parent=bdp,
        state="Bihar",
        district="Gaya",
        status=Partner.Status.APPROVED,
        user=partner_user,
    )


@pytest.fixture
def other_ddp(db):
    return Partner.objects.create(
        name="Ranchi DDP",
        email="ranchi@test.com",
        role=Partner.Role.DDP,
        state="Jharkhand",
        status=Partner.Status.APPROVED,
    )


@pytest.fixture
def make_customer(db, ddp):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        fields = {
            "name": f"Customer {counter['n']}",
            "phone": f"+9190000000{counter['n']:02d}",
            "email": f"customer{counter['n']}@test.com",
            "state": "Bihar",
            "district": "Gaya",
            "panel_type": Customer.PanelType.DCR,
            "proposed_capacity": Decimal("3"),
            "ddp": ddp,
        }
        fields.update(overrides)
        return Customer.objects.create(**fields)

    return _make


@pytest.fixture
def customer(make_customer):
    return make_customer(name="Ravi Kumar")


@pytest.fixture
def advance_journey():
    """Complete every milestone strictly before *milestone_key*."""

    def _advance(customer, milestone_key):
        target = catalog.get_definition(milestone_key)
        for definition in catalog.all_definitions()[: target.ordinal_index]:
            complete_milestone(customer.pk, definition.key, notes="done")

    return _advance


@pytest.fixture
def complete_journey(advance_journey):
    def _complete(customer):
        terminal = catalog.terminal_definition()
        advance_journey(customer, terminal.key)
        return complete_milestone(customer.pk, terminal.key, notes="paid in full")

    return _complete


@pytest.fixture
def make_vendor(db):
    def _make(name, state="Bihar", vendor_type=Vendor.VendorType.DISCOM_NET_METERING, status=Vendor.Status.APPROVED):
        return Vendor.objects.create(
            name=name,
            vendor_type=vendor_type,
            state=state,
            status=status,
        )

    return _make


@pytest.fixture
def discom_vendor(make_vendor):
    return make_vendor("Bihar Net Metering Co")


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def operator_client(api_client, operator_user):
    api_client.force_authenticate(user=operator_user)
    return api_client


@pytest.fixture
def partner_client(partner_user, ddp):
    client = APIClient()
    client.force_authenticate(user=partner_user)
    return client

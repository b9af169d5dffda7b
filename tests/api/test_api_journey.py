import uuid

import pytest
from rest_framework.test import APIClient

from journey.models import MilestoneRecord, VendorAssignment
from vendors.models import Vendor


def _journey_url(customer):
    return f"/api/v1/customers/{customer.pk}/journey/"


def _complete_url(customer, key):
    return f"/api/v1/customers/{customer.pk}/journey/{key}/complete/"


@pytest.mark.django_db
class TestJourneyAPI:
    def test_requires_authentication(self, customer):
        response = APIClient().get(_journey_url(customer))
        assert response.status_code in (401, 403)

    def test_get_journey(self, operator_client, customer):
        response = operator_client.get(_journey_url(customer))

        assert response.status_code == 200
        payload = response.json()
        assert payload["progress"]["completed"] == 0
        assert payload["progress"]["next_milestone"] == "application_submitted"
        keys = [m["milestone_key"] for m in payload["milestones"]]
        assert keys[0] == "application_submitted"
        assert keys[-1] == "final_payment_received"
        gated = [m for m in payload["milestones"] if m["vendor_gate"]]
        assert [m["vendor_gate"]["job_role"] for m in gated] == ["discom_net_metering", "bank_loan_facilitation"]

    def test_unknown_customer_is_404(self, operator_client):
        response = operator_client.get(f"/api/v1/customers/{uuid.uuid4()}/journey/")
        assert response.status_code == 404

    def test_complete_in_order(self, operator_client, operator_user, customer):
        response = operator_client.post(
            _complete_url(customer, "application_submitted"),
            {"notes": "Registered at camp"},
            format="json",
        )

        assert response.status_code == 200
        payload = response.json()
        assert payload["milestone"]["status"] == "completed"
        assert payload["milestone"]["updated_by_role"] == "operator"
        assert payload["milestone"]["updated_by_id"] == str(operator_user.pk)
        assert payload["assignment"] is None
        assert payload["progress"]["completed"] == 1

    def test_out_of_order_is_409(self, operator_client, customer):
        response = operator_client.post(_complete_url(customer, "site_survey"), {}, format="json")

        assert response.status_code == 409
        assert response.json()["code"] == "out_of_order"
        assert response.json()["blocked_by"] == "application_submitted"

    def test_already_completed_is_409(self, operator_client, customer):
        operator_client.post(_complete_url(customer, "application_submitted"), {}, format="json")
        response = operator_client.post(_complete_url(customer, "application_submitted"), {}, format="json")

        assert response.status_code == 409
        assert response.json()["code"] == "already_completed"

    def test_unknown_milestone_is_404(self, operator_client, customer):
        response = operator_client.post(_complete_url(customer, "teleport"), {}, format="json")

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_gated_completion_with_vendor(self, operator_client, customer, discom_vendor, advance_journey):
        advance_journey(customer, "portal_file_submission")

        response = operator_client.post(
            _complete_url(customer, "portal_file_submission"),
            {"vendor_id": str(discom_vendor.pk)},
            format="json",
        )

        assert response.status_code == 200
        payload = response.json()
        assert payload["assignment"]["vendor"]["id"] == str(discom_vendor.pk)
        assert payload["milestone"]["notes"] == "File submitted to PM Surya Ghar portal"

    def test_gated_completion_with_bad_vendor_is_422(self, operator_client, customer, make_vendor, advance_journey):
        advance_journey(customer, "portal_file_submission")
        pending = make_vendor("Pending", status=Vendor.Status.PENDING)

        response = operator_client.post(
            _complete_url(customer, "portal_file_submission"),
            {"vendor_id": str(pending.pk)},
            format="json",
        )

        assert response.status_code == 422
        assert response.json()["code"] == "vendor_assignment_failed"
        record = MilestoneRecord.objects.get(customer=customer, milestone_key="portal_file_submission")
        assert record.status == MilestoneRecord.Status.PENDING

    def test_partner_cannot_complete(self, partner_client, customer):
        response = partner_client.post(_complete_url(customer, "application_submitted"), {}, format="json")
        assert response.status_code == 403

    def test_partner_reads_own_customer_only(self, partner_client, customer, make_customer, other_ddp):
        foreign = make_customer(ddp=other_ddp)

        assert partner_client.get(_journey_url(customer)).status_code == 200
        assert partner_client.get(_journey_url(foreign)).status_code == 404


@pytest.mark.django_db
class TestVendorAssignmentAPI:
    def test_create_and_list(self, operator_client, customer, discom_vendor):
        url = f"/api/v1/customers/{customer.pk}/vendor-assignments/"

        created = operator_client.post(
            url,
            {"vendor_id": str(discom_vendor.pk), "job_role": "discom_net_metering", "notes": "urgent"},
            format="json",
        )
        listed = operator_client.get(url)

        assert created.status_code == 201
        assert created.json()["journey_stage"] == "pre_installation"
        assert [a["id"] for a in listed.json()] == [created.json()["id"]]

    def test_invalid_job_role_is_400(self, operator_client, customer, discom_vendor):
        response = operator_client.post(
            f"/api/v1/customers/{customer.pk}/vendor-assignments/",
            {"vendor_id": str(discom_vendor.pk), "job_role": "plumbing"},
            format="json",
        )
        assert response.status_code == 400
        assert not VendorAssignment.objects.exists()

    def test_unknown_vendor_is_404(self, operator_client, customer):
        response = operator_client.post(
            f"/api/v1/customers/{customer.pk}/vendor-assignments/",
            {"vendor_id": str(uuid.uuid4()), "job_role": "discom_net_metering"},
            format="json",
        )
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_candidate_vendors_prefer_customer_state(self, operator_client, customer, make_vendor):
        a = make_vendor("A", state="Bihar")
        b = make_vendor("B", state="Uttar Pradesh")
        c = make_vendor("C", state="Bihar")

        response = operator_client.get(
            f"/api/v1/customers/{customer.pk}/candidate-vendors/",
            {"job_role": "discom_net_metering"},
        )

        assert response.status_code == 200
        assert [v["id"] for v in response.json()] == [str(a.pk), str(c.pk), str(b.pk)]

    def test_candidate_vendors_requires_job_role(self, operator_client, customer):
        response = operator_client.get(f"/api/v1/customers/{customer.pk}/candidate-vendors/")
        assert response.status_code == 400

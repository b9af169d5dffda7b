import dataclasses

import pytest

from core.exceptions import NotFoundError
from journey import catalog


def test_catalog_ordinals_are_contiguous():
    definitions = catalog.all_definitions()
    assert [d.ordinal_index for d in definitions] == list(range(len(definitions)))
    assert len({d.key for d in definitions}) == len(definitions)


def test_exactly_two_gated_milestones():
    gated = catalog.gated_definitions()
    assert [d.key for d in gated] == ["portal_file_submission", "bank_loan_submission"]
    assert gated[0].vendor_gate.job_role == "discom_net_metering"
    assert gated[1].vendor_gate.job_role == "bank_loan_facilitation"
    assert all(d.vendor_gate.journey_stage == "pre_installation" for d in gated)


def test_terminal_definition_is_last_entry():
    assert catalog.terminal_definition().key == "final_payment_received"
    assert catalog.terminal_definition() is catalog.all_definitions()[-1]


def test_get_definition_unknown_key_raises_not_found():
    with pytest.raises(NotFoundError):
        catalog.get_definition("moon_landing")


def test_definitions_are_immutable():
    definition = catalog.get_definition("site_survey")
    with pytest.raises(dataclasses.FrozenInstanceError):
        definition.ordinal_index = 0


def test_gate_for_job_role_maps_to_vendor_type():
    assert catalog.gate_for_job_role("bank_loan_facilitation").vendor_type == "bank_loan_liaison"
    with pytest.raises(NotFoundError):
        catalog.gate_for_job_role("plumbing")

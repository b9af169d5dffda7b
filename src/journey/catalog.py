"""Installation journey catalog.

The catalog is a fixed, ordered tuple of :class:`MilestoneDefinition`
entries. A milestone's ``ordinal_index`` is its position in the tuple and is
what the tracker uses to enforce sequential completion. Two entries carry a
:class:`VendorGate`: completing them may assign a third-party facilitator in
the same operation.
"""
from __future__ import annotations

from dataclasses import dataclass

from core.exceptions import NotFoundError

JOB_ROLE_DISCOM = "discom_net_metering"
JOB_ROLE_BANK_LOAN = "bank_loan_facilitation"
JOB_ROLES = (JOB_ROLE_DISCOM, JOB_ROLE_BANK_LOAN)

STAGE_PRE_INSTALLATION = "pre_installation"
STAGE_INSTALLATION = "installation"
STAGE_POST_INSTALLATION = "post_installation"
JOURNEY_STAGES = (STAGE_PRE_INSTALLATION, STAGE_INSTALLATION, STAGE_POST_INSTALLATION)


@dataclass(frozen=True)
class VendorGate:
    job_role: str
    journey_stage: str
    vendor_type: str
    default_notes: str = ""


@dataclass(frozen=True)
class MilestoneDefinition:
    key: str
    ordinal_index: int
    label: str
    description: str
    vendor_gate: VendorGate | None = None

    @property
    def is_gated(self) -> bool:
        return self.vendor_gate is not None


_DISCOM_GATE = VendorGate(
    job_role=JOB_ROLE_DISCOM,
    journey_stage=STAGE_PRE_INSTALLATION,
    vendor_type="discom_net_metering",
    default_notes="File submitted to PM Surya Ghar portal",
)
_BANK_LOAN_GATE = VendorGate(
    job_role=JOB_ROLE_BANK_LOAN,
    journey_stage=STAGE_PRE_INSTALLATION,
    vendor_type="bank_loan_liaison",
    default_notes="Bank loan file submitted for processing",
)

_STEPS = (
    ("application_submitted", "Application Submitted", "Customer registration completed", None),
    ("documents_verified", "Documents Verified", "All required documents verified", None),
    ("site_survey", "Site Survey", "Technical survey of installation site", None),
    ("portal_file_submission", "Portal File Submission", "File submitted to the PM Surya Ghar portal", _DISCOM_GATE),
    ("bank_loan_submission", "Bank Loan Submission", "Loan file submitted to the bank", _BANK_LOAN_GATE),
    ("approval_received", "Approval Received", "DISCOM/Government approval received", None),
    ("installation_scheduled", "Installation Scheduled", "Installation date confirmed", None),
    ("goods_delivered", "Goods Delivered", "Panels, inverter and structure delivered to site", None),
    ("installation_complete", "Installation Complete", "Solar panels installed", None),
    ("net_meter_installed", "Net Meter Installed", "Bi-directional meter installed by DISCOM", None),
    ("grid_connected", "Grid Connected", "System connected to electricity grid", None),
    ("subsidy_applied", "Subsidy Applied", "Subsidy application submitted", None),
    ("subsidy_received", "Subsidy Received", "Subsidy amount credited", None),
    ("final_payment_received", "Final Payment Received", "Remaining customer payment collected", None),
)

MILESTONES: tuple[MilestoneDefinition, ...] = tuple(
    MilestoneDefinition(key=key, ordinal_index=index, label=label, description=description, vendor_gate=gate)
    for index, (key, label, description, gate) in enumerate(_STEPS)
)

_BY_KEY = {definition.key: definition for definition in MILESTONES}


def _validate(milestones) -> None:
    if len(_BY_KEY) != len(milestones):
        raise RuntimeError("Duplicate milestone key in the journey catalog.")
    for expected, definition in enumerate(milestones):
        if definition.ordinal_index != expected:
            raise RuntimeError(f"Milestone {definition.key!r} has a non-contiguous ordinal.")
        gate = definition.vendor_gate
        if gate is not None and (gate.job_role not in JOB_ROLES or gate.journey_stage not in JOURNEY_STAGES):
            raise RuntimeError(f"Milestone {definition.key!r} has an invalid vendor gate.")


_validate(MILESTONES)


def all_definitions() -> tuple[MilestoneDefinition, ...]:
    return MILESTONES


def get_definition(key: str) -> MilestoneDefinition:
    try:
        return _BY_KEY[key]
    except KeyError:
        raise NotFoundError(f"Unknown milestone '{key}'.", milestone_key=key) from None


def is_known(key: str) -> bool:
    return key in _BY_KEY


def terminal_definition() -> MilestoneDefinition:
    return MILESTONES[-1]


def gated_definitions() -> tuple[MilestoneDefinition, ...]:
    return tuple(d for d in MILESTONES if d.is_gated)


def gate_for_job_role(job_role: str) -> VendorGate:
    for definition in gated_definitions():
        if definition.vendor_gate.job_role == job_role:
            return definition.vendor_gate
    raise NotFoundError(f"Unknown job role '{job_role}'.", job_role=job_role)

"""Vendor-assignment gate.

Two catalog milestones (portal file submission and bank loan submission)
may be completed together with the assignment of a third-party facilitator.
Assignment and completion then form a single transaction: if either step
fails, neither is visible.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import IntegrityError, transaction
from django.utils import timezone

from core.actors import Actor
from core.exceptions import VendorAssignmentFailed
from core.shortcuts import get_or_not_found
from core.transactions import atomic_with_retry
from customers.models import Customer
from vendors.models import Vendor

from . import catalog
from .models import MilestoneRecord, VendorAssignment
from .services import complete_milestone
from .signals import vendor_assigned

logger = logging.getLogger("solarcrm")


@dataclass(frozen=True)
class GatedCompletion:
    record: MilestoneRecord
    assignment: VendorAssignment | None


@atomic_with_retry
def assign_vendor(
    customer_id,
    vendor_id,
    job_role: str,
    journey_stage: str | None = None,
    notes: str = "",
    actor: Actor | None = None,
) -> VendorAssignment:
    """Make *vendor_id* the active vendor for ``(customer, job_role)``.

    Any previously active assignment for the same job role is superseded.
    Raises ``NotFoundError`` for an unknown customer or vendor and
    ``VendorAssignmentFailed`` when the directory rejects the vendor.
    """
    actor = actor or Actor.system()
    if job_role not in catalog.JOB_ROLES:
        raise VendorAssignmentFailed(f"Unknown job role '{job_role}'.", job_role=job_role)
    gate = catalog.gate_for_job_role(job_role)
    journey_stage = journey_stage or gate.journey_stage
    if journey_stage not in catalog.JOURNEY_STAGES:
        raise VendorAssignmentFailed(
            f"Unknown journey stage '{journey_stage}'.", journey_stage=journey_stage,
        )

    # Serialises concurrent assignments for the same customer.
    customer = get_or_not_found(Customer.objects.select_for_update(), "Customer", pk=customer_id)
    vendor = get_or_not_found(Vendor.objects.all(), "Vendor", pk=vendor_id)
    if not vendor.is_approved:
        raise VendorAssignmentFailed(
            f"Vendor '{vendor.name}' is not approved.", vendor_id=vendor.pk,
        )
    if vendor.vendor_type != gate.vendor_type:
        raise VendorAssignmentFailed(
            f"Vendor '{vendor.name}' cannot act as {job_role}.", vendor_id=vendor.pk,
        )

    now = timezone.now()
    superseded = VendorAssignment.objects.filter(
        customer=customer,
        job_role=job_role,
        is_active=True,
    ).update(is_active=False, superseded_at=now, updated_at=now)

    try:
        with transaction.atomic():
            assignment = VendorAssignment.objects.create(
                customer=customer,
                vendor=vendor,
                job_role=job_role,
                journey_stage=journey_stage,
                notes=notes or "",
                assigned_by_role=actor.role,
                assigned_by_id=str(actor.id or ""),
            )
    except IntegrityError as exc:
        raise VendorAssignmentFailed(
            f"Another {job_role} assignment was created concurrently.", job_role=job_role,
        ) from exc

    logger.info(
        "vendor assigned customer=%s vendor=%s role=%s superseded=%s",
        customer.pk, vendor.pk, job_role, superseded,
    )
    vendor_assigned.send(sender=VendorAssignment, assignment=assignment, actor=actor)
    return assignment


@atomic_with_retry
def complete_gated_milestone(
    customer_id,
    milestone_key: str,
    vendor_id=None,
    notes: str = "",
    actor: Actor | None = None,
) -> GatedCompletion:
    """Optionally assign the gate's vendor, then complete the milestone.

    Without *vendor_id* this is a plain completion. With it, a failed
    assignment aborts before completion and a failed completion rolls the
    assignment back.
    """
    definition = catalog.get_definition(milestone_key)
    assignment = None
    if vendor_id:
        if not definition.is_gated:
            raise VendorAssignmentFailed(
                f"Milestone '{definition.key}' does not take a vendor.",
                milestone_key=definition.key,
            )
        gate = definition.vendor_gate
        notes = notes or gate.default_notes
        assignment = assign_vendor(
            customer_id,
            vendor_id,
            gate.job_role,
            gate.journey_stage,
            notes=notes,
            actor=actor,
        )
    record = complete_milestone(customer_id, definition.key, notes=notes, actor=actor)
    return GatedCompletion(record=record, assignment=assignment)


def prioritize_by_state(vendors, customer_state: str | None) -> list:
    """Stable partition: vendors in *customer_state* (case-insensitive) first."""
    vendors = list(vendors)
    wanted = (customer_state or "").strip().lower()
    if not wanted:
        return vendors
    return sorted(vendors, key=lambda v: 0 if (v.state or "").strip().lower() == wanted else 1)


def list_candidate_vendors(job_role: str, customer_state: str | None = None) -> list[Vendor]:
    """Approved vendors able to take *job_role*, local ones first."""
    gate = catalog.gate_for_job_role(job_role)
    return prioritize_by_state(
        Vendor.objects.approved().of_type(gate.vendor_type),
        customer_state,
    )


def assignments_for_customer(customer_id, include_superseded: bool = False):
    get_or_not_found(Customer.objects.all(), "Customer", pk=customer_id)
    qs = VendorAssignment.objects.filter(customer_id=customer_id).select_related("vendor")
    if not include_superseded:
        qs = qs.filter(is_active=True)
    return qs

"""ViewSets for the installation journey and commission API v1."""
import logging

from django.db.models import Q
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from commissions import incentives, services as commission_services
from commissions.models import Commission
from commissions.rates import PARTNER_TYPES
from core.actors import Actor
from core.exceptions import JourneyError, StorageUnavailable
from customers.models import Customer
from journey import catalog, gate as journey_gate, services as journey_services
from partners.models import Partner

from .pagination import StandardResultsSetPagination
from .permissions import IsOperator, IsOperatorOrPartnerReadOnly, partner_for_user
from .serializers import (
    CommissionSerializer,
    CommissionSummarySerializer,
    CompleteMilestoneSerializer,
    CustomerSerializer,
    IncentiveTargetSerializer,
    InverterSaleSerializer,
    JourneyProgressSerializer,
    MilestoneRecordSerializer,
    PartnerSerializer,
    VendorAssignmentCreateSerializer,
    VendorAssignmentSerializer,
    VendorSerializer,
)

logger = logging.getLogger("solarcrm")


def _error_response(exc):
    """Translate a service-layer error into an HTTP response."""
    if isinstance(exc, JourneyError):
        return Response(exc.as_dict(), status=exc.status_code)
    if isinstance(exc, StorageUnavailable):
        logger.error("storage unavailable: %s", exc)
        return Response(
            {"detail": str(exc), "code": exc.code},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


def _journey_payload(customer_id):
    records = journey_services.get_journey(customer_id)
    return {
        "customer": str(customer_id),
        "progress": JourneyProgressSerializer(journey_services.journey_progress(records)).data,
        "milestones": MilestoneRecordSerializer(records, many=True).data,
    }


# ---------------------------------------------------------------------------
# Customers: journey, vendor gate
# ---------------------------------------------------------------------------

class CustomerViewSet(viewsets.ReadOnlyModelViewSet):
    """Customers with their installation journey.

    Partners see the customers they own (and, for a BDP, those of its DDPs).
    """

    serializer_class = CustomerSerializer
    permission_classes = [IsOperatorOrPartnerReadOnly]
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["status", "state", "panel_type", "source", "ddp"]
    search_fields = ["name", "phone", "district"]
    ordering_fields = ["created_at", "name"]

    def get_queryset(self):
        qs = Customer.objects.select_related("ddp")
        user = self.request.user
        if user.is_staff:
            return qs
        partner = partner_for_user(user)
        if partner is None:
            return qs.none()
        return qs.filter(Q(ddp=partner) | Q(ddp__parent=partner))

    def get_permissions(self):
        if self.action == "candidate_vendors":
            return [IsOperator()]
        return super().get_permissions()

    @action(detail=True, methods=["get"], url_path="journey")
    def journey(self, request, pk=None):
        customer = self.get_object()
        try:
            return Response(_journey_payload(customer.pk))
        except (ValueError, StorageUnavailable) as e:
            return _error_response(e)

    @action(
        detail=True,
        methods=["post"],
        url_path=r"journey/(?P<milestone_key>[a-z0-9_]+)/complete",
        url_name="journey-complete",
    )
    def complete_milestone(self, request, pk=None, milestone_key=None):
        customer = self.get_object()
        serializer = CompleteMilestoneSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = journey_gate.complete_gated_milestone(
                customer.pk,
                milestone_key,
                vendor_id=data.get("vendor_id"),
                notes=data.get("notes", ""),
                actor=Actor.from_user(request.user),
            )
            payload = _journey_payload(customer.pk)
        except (ValueError, StorageUnavailable) as e:
            return _error_response(e)

        payload["milestone"] = MilestoneRecordSerializer(result.record).data
        payload["assignment"] = (
            VendorAssignmentSerializer(result.assignment).data if result.assignment else None
        )
        return Response(payload)

    @action(detail=True, methods=["get", "post"], url_path="vendor-assignments")
    def vendor_assignments(self, request, pk=None):
        customer = self.get_object()

        if request.method == "GET":
            include_superseded = request.query_params.get("include_superseded") in ("1", "true", "True")
            assignments = journey_gate.assignments_for_customer(customer.pk, include_superseded=include_superseded)
            return Response(VendorAssignmentSerializer(assignments, many=True).data)

        serializer = VendorAssignmentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            assignment = journey_gate.assign_vendor(
                customer.pk,
                data["vendor_id"],
                data["job_role"],
                data.get("journey_stage"),
                notes=data.get("notes", ""),
                actor=Actor.from_user(request.user),
            )
        except (ValueError, StorageUnavailable) as e:
            return _error_response(e)
        return Response(VendorAssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"], url_path="candidate-vendors")
    def candidate_vendors(self, request, pk=None):
        customer = self.get_object()
        job_role = request.query_params.get("job_role", "")
        if job_role not in catalog.JOB_ROLES:
            return Response(
                {"detail": f"job_role must be one of: {', '.join(catalog.JOB_ROLES)}."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        state = request.query_params.get("state") or customer.state
        vendors = journey_gate.list_candidate_vendors(job_role, state)
        return Response(VendorSerializer(vendors, many=True).data)


# ---------------------------------------------------------------------------
# Partners: commissions, incentives
# ---------------------------------------------------------------------------

class PartnerViewSet(viewsets.ReadOnlyModelViewSet):
    """Partners with their commission ledger and incentive targets."""

    serializer_class = PartnerSerializer
    permission_classes = [IsOperatorOrPartnerReadOnly]
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ["role", "status", "state", "parent"]
    search_fields = ["name", "phone", "email"]

    def get_queryset(self):
        qs = Partner.objects.select_related("parent")
        user = self.request.user
        if user.is_staff:
            return qs
        partner = partner_for_user(user)
        if partner is None:
            return qs.none()
        return qs.filter(Q(pk=partner.pk) | Q(parent=partner))

    def get_permissions(self):
        if self.action == "inverter_sales":
            return [IsOperator()]
        return super().get_permissions()

    @action(detail=True, methods=["get"], url_path="commissions")
    def commissions(self, request, pk=None):
        partner = self.get_object()
        status_filter = request.query_params.get("status") or None
        source_filter = request.query_params.get("source") or None
        if status_filter and status_filter not in Commission.Status.values:
            return Response({"detail": "Invalid status filter."}, status=status.HTTP_400_BAD_REQUEST)
        if source_filter and source_filter not in Commission.Source.values:
            return Response({"detail": "Invalid source filter."}, status=status.HTTP_400_BAD_REQUEST)

        qs = commission_services.commissions_for_partner(
            partner.pk, status=status_filter, source=source_filter,
        )
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(CommissionSerializer(page, many=True).data)
        return Response(CommissionSerializer(qs, many=True).data)

    @action(detail=True, methods=["get"], url_path="commission-summary")
    def commission_summary(self, request, pk=None):
        partner = self.get_object()
        summary = commission_services.commission_summary(partner.pk)
        return Response(CommissionSummarySerializer(summary).data)

    @action(detail=True, methods=["get"], url_path="incentive-target")
    def incentive_target(self, request, pk=None):
        partner = self.get_object()
        # Only operators may look at a target under another partner type.
        partner_type = partner.role
        if request.user.is_staff:
            partner_type = request.query_params.get("partner_type") or partner.role
        if partner_type not in PARTNER_TYPES:
            return Response({"detail": "Invalid partner_type."}, status=status.HTTP_400_BAD_REQUEST)
        target = incentives.current_target(partner.pk, partner_type)
        return Response(IncentiveTargetSerializer(target).data)

    @action(detail=True, methods=["get"], url_path="incentive-targets")
    def incentive_targets(self, request, pk=None):
        partner = self.get_object()
        qs = incentives.targets_for_partner(partner.pk)
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(IncentiveTargetSerializer(page, many=True).data)
        return Response(IncentiveTargetSerializer(qs, many=True).data)

    @action(detail=True, methods=["post"], url_path="inverter-sales")
    def inverter_sales(self, request, pk=None):
        partner = self.get_object()
        serializer = InverterSaleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            recorded = commission_services.record_inverter_sale(
                partner.pk,
                serializer.validated_data["units_sold"],
                reference=serializer.validated_data.get("reference", ""),
            )
        except (ValueError, StorageUnavailable) as e:
            return _error_response(e)
        return Response(CommissionSerializer(recorded, many=True).data, status=status.HTTP_201_CREATED)

# bills/views.py

"""
======================================================
PATH: bills/views.py
======================================================
BILLS API

- POST /api/bills/parse-text/         parse pasted lines -> items (nothing saved)
- GET  /api/bills/                    list (firm_id, status, category, party, date_from, date_to, q)
- POST /api/bills/                    create with items
- GET  /api/bills/:id/
- POST /api/bills/:id/approve/
- POST /api/bills/:id/reject/

Security:
- parse / create / read: bills.enter
- approve / reject: bills.review
======================================================
"""

from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from bills.filters import BillFilter
from bills.models import Bill
from bills.serializers import (
    BillCreateSerializer,
    BillSerializer,
    ParsedItemSerializer,
    ParseTextInputSerializer,
    RejectBillInputSerializer,
)
from bills.services.bill_lifecycle import BillLifecycleError
from bills.services.bill_service import approve_bill, create_bill, reject_bill
from bills.text_parser import BillParseError, parse_bill_text
from firms.mixins import FirmScopedMixin
from ledger.api.responses import bad_request, data_unavailable
from ledger.exceptions import DataUnavailable, InvalidInput
from parties.services.party_store import PartyNotFound
from permissions.roles import CAP_BILLS_ENTER, CAP_BILLS_REVIEW, HasCapability


class BillTextParseView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_BILLS_ENTER

    @extend_schema(
        tags=["bills"],
        request=ParseTextInputSerializer,
        responses={200: ParsedItemSerializer(many=True)},
    )
    def post(self, request, *args, **kwargs):
        s = ParseTextInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        category = s.validated_data.get("category", "")

        try:
            items = parse_bill_text(s.validated_data["text"])
        except BillParseError as exc:
            return bad_request(exc)

        rows = [{**item.as_dict(), "category": category} for item in items]
        return Response(
            {"count": len(rows), "items": ParsedItemSerializer(rows, many=True).data},
            status=status.HTTP_200_OK,
        )


@extend_schema_view(
    list=extend_schema(tags=["bills"]),
    retrieve=extend_schema(tags=["bills"]),
)
class BillViewSet(
    FirmScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = BillSerializer
    filterset_class = BillFilter

    def get_permissions(self):
        review = self.action in ("approve", "reject")
        self.required_capability = CAP_BILLS_REVIEW if review else CAP_BILLS_ENTER
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        qs = Bill.objects.select_related("created_by").prefetch_related("items")
        return self.scope_to_firms(qs).order_by("-bill_date", "-created_at")

    @extend_schema(tags=["bills"], request=BillCreateSerializer, responses={201: BillSerializer})
    def create(self, request, *args, **kwargs):
        s = BillCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        firm = self.resolve_firm(data["firm_id"])

        try:
            bill = create_bill(
                firm=firm,
                party_id=data.get("party_id"),
                bill_number=data["bill_number"],
                supplier_name=data.get("supplier_name", ""),
                bill_date=data.get("bill_date"),
                category=data["category"],
                notes=data.get("notes", ""),
                source_text=data.get("source_text", ""),
                items=data["items"],
                user=request.user,
            )
        except (BillParseError, InvalidInput, PartyNotFound) as exc:
            return bad_request(exc)
        except DjangoValidationError as exc:
            return Response(
                getattr(exc, "message_dict", None) or {"detail": exc.messages},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except DataUnavailable as exc:
            return data_unavailable(exc)

        bill = self.get_queryset().get(id=bill.id)
        return Response(BillSerializer(bill).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["bills"], request=None, responses={200: BillSerializer})
    @action(detail=True, methods=["post"], url_path="approve")
    def approve(self, request, pk=None):
        bill = self.get_object()
        try:
            bill = approve_bill(bill_id=bill.id, firm_id=bill.firm_id, user=request.user)
        except BillLifecycleError as exc:
            return bad_request(exc)
        return Response(BillSerializer(bill).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["bills"], request=RejectBillInputSerializer, responses={200: BillSerializer})
    @action(detail=True, methods=["post"], url_path="reject")
    def reject(self, request, pk=None):
        bill = self.get_object()
        s = RejectBillInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            bill = reject_bill(
                bill_id=bill.id,
                firm_id=bill.firm_id,
                user=request.user,
                reason=s.validated_data.get("reason", ""),
            )
        except BillLifecycleError as exc:
            return bad_request(exc)
        return Response(BillSerializer(bill).data, status=status.HTTP_200_OK)

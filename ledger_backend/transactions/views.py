# transactions/views.py

"""
======================================================
PATH: transactions/views.py
======================================================
DAY BOOK API

- GET    /api/transactions/                 list (filters: firm_id, party_id, status, type,
                                            payment_method, date_from, date_to, q)
- POST   /api/transactions/                 record a sale / collection / purchase
- GET    /api/transactions/:id/
- PATCH  /api/transactions/:id/             edit while pending
- DELETE /api/transactions/:id/             delete while pending
- GET    /api/transactions/pending/         approval queue
- POST   /api/transactions/:id/approve/
- POST   /api/transactions/:id/reject/

Security:
- read: ledger.view
- write: transactions.enter (without approve capability, only your own pending rows)
- approval queue + approve/reject: transactions.approve
- every row is scoped to the caller's firms
======================================================
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from firms.mixins import FirmScopedMixin
from ledger.api.responses import bad_request, data_unavailable
from ledger.exceptions import DataUnavailable, InvalidInput
from parties.services.party_store import PartyNotFound
from permissions.roles import (
    CAP_LEDGER_VIEW,
    CAP_TRANSACTIONS_APPROVE,
    CAP_TRANSACTIONS_ENTER,
    HasCapability,
    user_has_capability,
)
from transactions.filters import TransactionFilter
from transactions.models import Transaction
from transactions.serializers import (
    RejectInputSerializer,
    TransactionCreateSerializer,
    TransactionSerializer,
    TransactionUpdateSerializer,
)
from transactions.services.entry_service import (
    approve_transaction,
    delete_pending_transaction,
    record_transaction,
    reject_transaction,
    update_pending_transaction,
)
from transactions.services.transaction_lifecycle import TransactionLifecycleError

FIRM_PARAM = OpenApiParameter(
    name="firm_id",
    type=str,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Restrict to one firm (must be accessible to the caller).",
)


@extend_schema_view(
    list=extend_schema(tags=["transactions"], parameters=[FIRM_PARAM]),
    retrieve=extend_schema(tags=["transactions"]),
)
class TransactionViewSet(FirmScopedMixin, viewsets.ModelViewSet):
    serializer_class = TransactionSerializer
    filterset_class = TransactionFilter
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    CAPABILITY_BY_ACTION = {
        "list": CAP_LEDGER_VIEW,
        "retrieve": CAP_LEDGER_VIEW,
        "create": CAP_TRANSACTIONS_ENTER,
        "partial_update": CAP_TRANSACTIONS_ENTER,
        "destroy": CAP_TRANSACTIONS_ENTER,
        "pending": CAP_TRANSACTIONS_APPROVE,
        "approve": CAP_TRANSACTIONS_APPROVE,
        "reject": CAP_TRANSACTIONS_APPROVE,
    }

    def get_permissions(self):
        self.required_capability = self.CAPABILITY_BY_ACTION.get(self.action, CAP_LEDGER_VIEW)
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        qs = Transaction.objects.select_related("party", "created_by", "approved_by")
        return self.scope_to_firms(qs).order_by("-transaction_date", "-created_at")

    def _ensure_can_modify(self, txn: Transaction):
        user = self.request.user
        if user_has_capability(user, CAP_TRANSACTIONS_APPROVE):
            return
        if txn.created_by_id != user.id:
            raise PermissionDenied("You can only change transactions you entered.")

    # ======================================================
    # WRITE
    # ======================================================

    @extend_schema(
        tags=["transactions"],
        request=TransactionCreateSerializer,
        responses={201: TransactionSerializer},
    )
    def create(self, request, *args, **kwargs):
        s = TransactionCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        firm = self.resolve_firm(data["firm_id"])

        try:
            txn = record_transaction(
                firm=firm,
                party_id=data["party_id"],
                txn_type=data["type"],
                amount=data["amount"],
                transaction_date=data.get("transaction_date"),
                bill_number=data.get("bill_number", ""),
                payment_method=data.get("payment_method", ""),
                reference_number=data.get("reference_number", ""),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except PartyNotFound as exc:
            return bad_request(exc)
        except InvalidInput as exc:
            return bad_request(exc)
        except DataUnavailable as exc:
            return data_unavailable(exc)

        return Response(TransactionSerializer(txn).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["transactions"],
        request=TransactionUpdateSerializer,
        responses={200: TransactionSerializer},
    )
    def partial_update(self, request, *args, **kwargs):
        txn = self.get_object()
        self._ensure_can_modify(txn)

        s = TransactionUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        try:
            txn = update_pending_transaction(
                txn_id=txn.id,
                firm_id=txn.firm_id,
                changes=dict(s.validated_data),
                user=request.user,
            )
        except (InvalidInput, TransactionLifecycleError) as exc:
            return bad_request(exc)

        return Response(TransactionSerializer(txn).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["transactions"], responses={204: None})
    def destroy(self, request, *args, **kwargs):
        txn = self.get_object()
        self._ensure_can_modify(txn)

        try:
            delete_pending_transaction(txn_id=txn.id, firm_id=txn.firm_id, user=request.user)
        except TransactionLifecycleError as exc:
            return bad_request(exc)

        return Response(status=status.HTTP_204_NO_CONTENT)

    # ======================================================
    # APPROVAL
    # ======================================================

    @extend_schema(
        tags=["transactions"],
        parameters=[FIRM_PARAM],
        responses={200: TransactionSerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path="pending")
    def pending(self, request):
        qs = self.filter_queryset(self.get_queryset()).filter(status=Transaction.STATUS_PENDING)
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(TransactionSerializer(page, many=True).data)
        return Response(TransactionSerializer(qs, many=True).data)

    @extend_schema(tags=["transactions"], request=None, responses={200: TransactionSerializer})
    @action(detail=True, methods=["post"], url_path="approve")
    def approve(self, request, pk=None):
        txn = self.get_object()
        try:
            txn = approve_transaction(txn_id=txn.id, firm_id=txn.firm_id, user=request.user)
        except (InvalidInput, TransactionLifecycleError) as exc:
            return bad_request(exc)
        return Response(TransactionSerializer(txn).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["transactions"],
        request=RejectInputSerializer,
        responses={200: TransactionSerializer},
    )
    @action(detail=True, methods=["post"], url_path="reject")
    def reject(self, request, pk=None):
        txn = self.get_object()
        s = RejectInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            txn = reject_transaction(
                txn_id=txn.id,
                firm_id=txn.firm_id,
                user=request.user,
                reason=s.validated_data.get("reason", ""),
            )
        except TransactionLifecycleError as exc:
            return bad_request(exc)
        return Response(TransactionSerializer(txn).data, status=status.HTTP_200_OK)

# cheques/views.py

"""
CHEQUE REGISTER API

- GET  /api/cheques/                  list (firm_id, status, direction, party, due, due_from, due_to)
- POST /api/cheques/                  register
- GET  /api/cheques/:id/
- POST /api/cheques/:id/clear/
- POST /api/cheques/:id/bounce/
- POST /api/cheques/:id/cancel/

Read: ledger.view. Everything else: cheques.manage.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from cheques.filters import ChequeFilter
from cheques.models import Cheque
from cheques.serializers import (
    ChequeBounceSerializer,
    ChequeClearSerializer,
    ChequeCreateSerializer,
    ChequeSerializer,
)
from cheques.services.cheque_lifecycle import (
    ChequeLifecycleError,
    bounce_cheque,
    cancel_cheque,
    clear_cheque,
    register_cheque,
)
from firms.mixins import FirmScopedMixin
from ledger.api.responses import bad_request, data_unavailable
from ledger.exceptions import DataUnavailable, InvalidInput
from parties.services.party_store import PartyNotFound
from permissions.roles import CAP_CHEQUES_MANAGE, CAP_LEDGER_VIEW, HasCapability


@extend_schema_view(
    list=extend_schema(tags=["cheques"]),
    retrieve=extend_schema(tags=["cheques"]),
)
class ChequeViewSet(
    FirmScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = ChequeSerializer
    filterset_class = ChequeFilter

    def get_permissions(self):
        read_only = self.action in ("list", "retrieve")
        self.required_capability = CAP_LEDGER_VIEW if read_only else CAP_CHEQUES_MANAGE
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        qs = Cheque.objects.select_related("party")
        return self.scope_to_firms(qs).order_by("due_date", "created_at")

    @extend_schema(tags=["cheques"], request=ChequeCreateSerializer, responses={201: ChequeSerializer})
    def create(self, request, *args, **kwargs):
        s = ChequeCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        firm = self.resolve_firm(data["firm_id"])

        try:
            cheque = register_cheque(
                firm=firm,
                party_id=data["party_id"],
                direction=data["direction"],
                cheque_number=data["cheque_number"],
                amount=data["amount"],
                issue_date=data.get("issue_date"),
                due_date=data["due_date"],
                bank_name=data.get("bank_name", ""),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except (InvalidInput, PartyNotFound) as exc:
            return bad_request(exc)
        except DjangoValidationError as exc:
            return Response(
                getattr(exc, "message_dict", None) or {"detail": exc.messages},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except DataUnavailable as exc:
            return data_unavailable(exc)

        return Response(ChequeSerializer(cheque).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["cheques"], request=ChequeClearSerializer, responses={200: ChequeSerializer})
    @action(detail=True, methods=["post"], url_path="clear")
    def clear(self, request, pk=None):
        cheque = self.get_object()
        s = ChequeClearSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            cheque = clear_cheque(
                cheque_id=cheque.id,
                firm_id=cheque.firm_id,
                cleared_on=s.validated_data.get("cleared_date"),
                user=request.user,
            )
        except (ChequeLifecycleError, InvalidInput) as exc:
            return bad_request(exc)
        return Response(ChequeSerializer(cheque).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["cheques"], request=ChequeBounceSerializer, responses={200: ChequeSerializer})
    @action(detail=True, methods=["post"], url_path="bounce")
    def bounce(self, request, pk=None):
        cheque = self.get_object()
        s = ChequeBounceSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            cheque = bounce_cheque(
                cheque_id=cheque.id,
                firm_id=cheque.firm_id,
                reason=s.validated_data.get("reason", ""),
                bounced_on=s.validated_data.get("bounced_date"),
                user=request.user,
            )
        except (ChequeLifecycleError, InvalidInput) as exc:
            return bad_request(exc)
        return Response(ChequeSerializer(cheque).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["cheques"], request=None, responses={200: ChequeSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        cheque = self.get_object()
        try:
            cheque = cancel_cheque(cheque_id=cheque.id, firm_id=cheque.firm_id, user=request.user)
        except ChequeLifecycleError as exc:
            return bad_request(exc)
        return Response(ChequeSerializer(cheque).data, status=status.HTTP_200_OK)

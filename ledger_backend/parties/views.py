# parties/views.py

"""
======================================================
PATH: parties/views.py
======================================================
PARTIES + LOCATION GROUPS API

Parties:
- GET    /api/parties/                      list (firm_id, type, is_active, location_group, q)
                                            each row carries its live ledger balance
- POST   /api/parties/                      create (opening balance allowed here only)
- GET    /api/parties/:id/
- PATCH  /api/parties/:id/                  contact / grouping fields
- POST   /api/parties/:id/deactivate/       soft delete
- POST   /api/parties/:id/reconcile/        set stored balance as of a date (admin)

Location groups:
- GET/POST /api/parties/location-groups/
- GET/PATCH/DELETE /api/parties/location-groups/:id/

There is no hard delete for parties.
======================================================
"""

from __future__ import annotations

from collections import defaultdict

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Count
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from firms.mixins import FirmScopedMixin
from ledger.api.responses import bad_request, data_unavailable
from ledger.exceptions import DataUnavailable, InvalidInput
from ledger.services.balance_service import get_firm_balances
from parties.filters import PartyFilter
from parties.models import LocationGroup, Party
from parties.serializers import (
    LocationGroupSerializer,
    PartySerializer,
    ReconcileInputSerializer,
)
from parties.services.party_store import deactivate_party, update_party_balance
from permissions.roles import (
    CAP_LEDGER_RECONCILE,
    CAP_LEDGER_VIEW,
    CAP_PARTIES_EDIT,
    HasCapability,
)


def _save_or_400(serializer, **kwargs):
    try:
        return serializer.save(**kwargs)
    except DjangoValidationError as exc:
        detail = getattr(exc, "message_dict", None) or {"detail": exc.messages}
        raise serializers.ValidationError(detail) from exc


def _balances_for(parties) -> dict:
    by_firm = defaultdict(list)
    for party in parties:
        by_firm[party.firm_id].append(party)

    out = {}
    for firm_parties in by_firm.values():
        out.update(get_firm_balances(firm=firm_parties[0].firm, parties=firm_parties))
    return out


@extend_schema_view(
    list=extend_schema(tags=["parties"]),
    retrieve=extend_schema(tags=["parties"]),
    create=extend_schema(tags=["parties"]),
    partial_update=extend_schema(tags=["parties"]),
)
class PartyViewSet(FirmScopedMixin, viewsets.ModelViewSet):
    serializer_class = PartySerializer
    filterset_class = PartyFilter
    http_method_names = ["get", "post", "patch", "head", "options"]

    CAPABILITY_BY_ACTION = {
        "list": CAP_LEDGER_VIEW,
        "retrieve": CAP_LEDGER_VIEW,
        "create": CAP_PARTIES_EDIT,
        "partial_update": CAP_PARTIES_EDIT,
        "deactivate": CAP_PARTIES_EDIT,
        "reconcile": CAP_LEDGER_RECONCILE,
    }

    def get_permissions(self):
        self.required_capability = self.CAPABILITY_BY_ACTION.get(self.action, CAP_LEDGER_VIEW)
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        qs = Party.objects.select_related("firm", "location_group")
        return self.scope_to_firms(qs).order_by("name")

    def _respond(self, parties, *, many: bool, status_code=status.HTTP_200_OK):
        rows = list(parties) if many else [parties]
        try:
            balances = _balances_for(rows)
        except DataUnavailable as exc:
            return data_unavailable(exc)

        s = PartySerializer(parties, many=many, context={"balances": balances, "request": self.request})
        return Response(s.data, status=status_code)

    def list(self, request, *args, **kwargs):
        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            try:
                balances = _balances_for(page)
            except DataUnavailable as exc:
                return data_unavailable(exc)
            s = PartySerializer(page, many=True, context={"balances": balances, "request": request})
            return self.get_paginated_response(s.data)
        return self._respond(qs, many=True)

    def retrieve(self, request, *args, **kwargs):
        return self._respond(self.get_object(), many=False)

    def create(self, request, *args, **kwargs):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        firm = self.resolve_firm(s.validated_data.pop("firm_id"))
        party = _save_or_400(s, firm=firm, created_by=request.user)
        return self._respond(party, many=False, status_code=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        s = self.get_serializer(self.get_object(), data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        party = _save_or_400(s)
        return self._respond(party, many=False)

    # ======================================================
    # ACTIONS
    # ======================================================

    @extend_schema(tags=["parties"], request=None, responses={200: PartySerializer})
    @action(detail=True, methods=["post"], url_path="deactivate")
    def deactivate(self, request, pk=None):
        party = self.get_object()
        party = deactivate_party(party_id=party.id, firm_id=party.firm_id, acting_user=request.user)
        return self._respond(party, many=False)

    @extend_schema(tags=["parties"], request=ReconcileInputSerializer, responses={200: PartySerializer})
    @action(detail=True, methods=["post"], url_path="reconcile")
    def reconcile(self, request, pk=None):
        party = self.get_object()
        s = ReconcileInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            party = update_party_balance(
                party_id=party.id,
                firm_id=party.firm_id,
                new_balance=s.validated_data["balance"],
                as_of=s.validated_data.get("as_of"),
                acting_user=request.user,
            )
        except InvalidInput as exc:
            return bad_request(exc)
        except DataUnavailable as exc:
            return data_unavailable(exc)

        return self._respond(party, many=False)


@extend_schema_view(
    list=extend_schema(tags=["parties"]),
    retrieve=extend_schema(tags=["parties"]),
    create=extend_schema(tags=["parties"]),
    partial_update=extend_schema(tags=["parties"]),
    destroy=extend_schema(tags=["parties"]),
)
class LocationGroupViewSet(FirmScopedMixin, viewsets.ModelViewSet):
    serializer_class = LocationGroupSerializer
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_permissions(self):
        read_only = self.action in ("list", "retrieve")
        self.required_capability = CAP_LEDGER_VIEW if read_only else CAP_PARTIES_EDIT
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        qs = LocationGroup.objects.annotate(party_count=Count("parties"))
        return self.scope_to_firms(qs).order_by("name")

    def perform_create(self, serializer):
        firm = self.resolve_firm(serializer.validated_data.pop("firm_id"))
        _save_or_400(serializer, firm=firm)

    def perform_update(self, serializer):
        serializer.validated_data.pop("firm_id", None)
        _save_or_400(serializer)

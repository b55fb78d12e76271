# ledger/api/views/balances.py

"""
PATH: ledger/api/views/balances.py

PARTY BALANCE (LIVE)

GET /api/ledger/parties/<party_id>/balance/?request_seq=

- stored balance + approved transactions dated after balance_as_of
- read-only; never rewrites the party row
- store failure -> 503 {"detail", "retryable": true}, never a zero balance
"""

from __future__ import annotations

from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ledger.api.responses import bad_request, data_unavailable
from ledger.api.serializers import PartyBalanceSerializer
from ledger.api.views._party import request_seq, resolve_party_for_user
from ledger.exceptions import DataUnavailable, InvalidInput
from ledger.services.balance_service import get_party_balance
from parties.services.party_store import debtor_days
from permissions.roles import CAP_LEDGER_VIEW, HasCapability

REQUEST_SEQ_PARAM = OpenApiParameter(
    name="request_seq",
    type=str,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Opaque client sequence token, echoed back so stale responses can be dropped.",
)


class PartyBalanceView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_LEDGER_VIEW

    @extend_schema(
        tags=["ledger"],
        parameters=[REQUEST_SEQ_PARAM],
        responses={200: PartyBalanceSerializer},
    )
    def get(self, request, party_id, *args, **kwargs):
        try:
            party = resolve_party_for_user(user=request.user, party_id=party_id)
            result = get_party_balance(party=party)
        except InvalidInput as exc:
            return bad_request(exc)
        except DataUnavailable as exc:
            return data_unavailable(exc)

        payload = {
            "party_id": str(party.id),
            "party_name": party.name,
            "party_type": party.type,
            "opening_balance": party.balance,
            "balance_as_of": party.balance_as_of,
            "balance": result.balance,
            "counted_transactions": result.counted,
            "debtor_days": debtor_days(party=party, current_balance=result.balance),
            "anomalies": result.anomalies,
            "generated_at": timezone.now(),
            "request_seq": request_seq(request),
        }
        return Response(PartyBalanceSerializer(payload).data, status=status.HTTP_200_OK)

# ledger/api/views/statements.py

"""
PATH: ledger/api/views/statements.py

PARTY STATEMENT

GET /api/ledger/parties/<party_id>/statement/?date_from=YYYY-MM-DD&date_to=YYYY-MM-DD&request_seq=

- first line is the synthetic "Opening Balance" dated date_from
- remaining lines oldest first, each with the balance after it
- last line's running balance == closing balance
- both dates required; date_from after date_to -> 400
"""

from __future__ import annotations

from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ledger.api.responses import bad_request, data_unavailable
from ledger.api.serializers import StatementSerializer
from ledger.api.views._party import request_seq, resolve_party_for_user
from ledger.api.views.balances import REQUEST_SEQ_PARAM
from ledger.exceptions import DataUnavailable, InvalidInput
from ledger.services.balance_service import get_party_statement
from permissions.roles import CAP_LEDGER_VIEW, HasCapability


class PartyStatementView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_LEDGER_VIEW

    @extend_schema(
        tags=["ledger"],
        parameters=[
            OpenApiParameter(name="date_from", type=str, location=OpenApiParameter.QUERY, required=True),
            OpenApiParameter(name="date_to", type=str, location=OpenApiParameter.QUERY, required=True),
            REQUEST_SEQ_PARAM,
        ],
        responses={200: StatementSerializer},
    )
    def get(self, request, party_id, *args, **kwargs):
        try:
            party = resolve_party_for_user(user=request.user, party_id=party_id)
            statement = get_party_statement(
                party=party,
                date_from=request.query_params.get("date_from"),
                date_to=request.query_params.get("date_to"),
            )
        except InvalidInput as exc:
            return bad_request(exc)
        except DataUnavailable as exc:
            return data_unavailable(exc)

        payload = {
            "party_id": str(party.id),
            "party_name": party.name,
            "party_type": party.type,
            "date_from": statement.date_range.date_from,
            "date_to": statement.date_range.date_to,
            "opening_balance": statement.opening_balance,
            "closing_balance": statement.closing_balance,
            "total_debits": statement.total_debits,
            "total_credits": statement.total_credits,
            "lines": statement.lines,
            "anomalies": statement.anomalies,
            "generated_at": timezone.now(),
            "request_seq": request_seq(request),
        }
        return Response(StatementSerializer(payload).data, status=status.HTTP_200_OK)

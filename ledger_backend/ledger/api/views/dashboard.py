# ledger/api/views/dashboard.py

"""
PATH: ledger/api/views/dashboard.py

FIRM DASHBOARD

GET /api/ledger/dashboard/?firm_id=&date_from=&date_to=

- firm_id required and must be accessible to the caller
- period defaults to the current month up to today
"""

from __future__ import annotations

from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from firms.mixins import FirmScopedMixin
from ledger.api.responses import bad_request, data_unavailable
from ledger.api.serializers import DashboardSerializer
from ledger.exceptions import DataUnavailable, InvalidInput
from ledger.services.overview_service import get_dashboard_overview
from permissions.roles import CAP_REPORTS_VIEW, HasCapability


class DashboardView(FirmScopedMixin, APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW

    @extend_schema(
        tags=["ledger"],
        parameters=[
            OpenApiParameter(name="firm_id", type=str, location=OpenApiParameter.QUERY, required=True),
            OpenApiParameter(name="date_from", type=str, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="date_to", type=str, location=OpenApiParameter.QUERY, required=False),
        ],
        responses={200: DashboardSerializer},
    )
    def get(self, request, *args, **kwargs):
        firm = self.resolve_firm(self.requested_firm_id())

        try:
            overview = get_dashboard_overview(
                firm=firm,
                date_from=request.query_params.get("date_from") or None,
                date_to=request.query_params.get("date_to") or None,
            )
        except InvalidInput as exc:
            return bad_request(exc)
        except DataUnavailable as exc:
            return data_unavailable(exc)

        overview["generated_at"] = timezone.now()
        return Response(DashboardSerializer(overview).data, status=status.HTTP_200_OK)

# firms/views.py

"""
FIRM API (READ-ONLY)

Firm administration happens in Django Admin. The API only answers
"which firms can I work in?" so the client can populate its firm switcher.
"""

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from firms.mixins import UUID_LOOKUP_REGEX
from firms.serializers import FirmSerializer
from firms.services.access import accessible_firms


@extend_schema_view(
    list=extend_schema(tags=["firms"]),
    retrieve=extend_schema(tags=["firms"]),
)
class FirmViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = FirmSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None
    lookup_value_regex = UUID_LOOKUP_REGEX

    def get_queryset(self):
        return accessible_firms(self.request.user).order_by("name")

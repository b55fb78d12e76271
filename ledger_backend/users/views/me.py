# users/views/me.py

from drf_spectacular.utils import extend_schema
from rest_framework import serializers
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from firms.serializers import FirmSerializer
from firms.services.access import accessible_firms
from permissions.roles import effective_capabilities_for
from users.serializers import UserSerializer


class MeSerializer(serializers.Serializer):
    user = UserSerializer()
    capabilities = serializers.ListField(child=serializers.CharField())
    firms = FirmSerializer(many=True)


class MeView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = MeSerializer

    @extend_schema(
        tags=["auth"],
        responses={200: MeSerializer},
        description="Current user, their capabilities and the firms they can work in.",
    )
    def get(self, request):
        user = request.user
        return Response(
            {
                "user": UserSerializer(user).data,
                "capabilities": sorted(effective_capabilities_for(user)),
                "firms": FirmSerializer(accessible_firms(user).order_by("name"), many=True).data,
            }
        )

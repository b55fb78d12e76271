# users/views/users.py

"""
USER ADMINISTRATION (ADMIN ONLY)

- GET  /api/auth/users/                 list staff users
- POST /api/auth/users/                 create user with role + firm grants
- GET  /api/auth/users/:id/             retrieve
- POST /api/auth/users/:id/deactivate/  soft-disable login
"""

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from firms.mixins import UUID_LOOKUP_REGEX
from permissions.roles import CAP_USERS_MANAGE, HasCapability
from users.serializers import UserCreateSerializer, UserSerializer
from users.services.user_admin import UserAdminError, create_staff_user, deactivate_user

User = get_user_model()


@extend_schema_view(
    list=extend_schema(tags=["users"]),
    retrieve=extend_schema(tags=["users"]),
)
class UserAdminViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_USERS_MANAGE
    lookup_value_regex = UUID_LOOKUP_REGEX
    filterset_fields = ["role", "is_active"]

    def get_queryset(self):
        return User.objects.all().prefetch_related("firm_access").order_by("email")

    @extend_schema(tags=["users"], request=UserCreateSerializer, responses={201: UserSerializer})
    def create(self, request, *args, **kwargs):
        s = UserCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            user = create_staff_user(
                email=data["email"],
                password=data["password"],
                role=data["role"],
                full_name=data.get("full_name", ""),
                username=data.get("username", ""),
                firm_ids=data.get("firm_ids", []),
                created_by=request.user,
            )
        except UserAdminError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["users"], request=None, responses={200: UserSerializer})
    @action(detail=True, methods=["post"], url_path="deactivate")
    def deactivate(self, request, pk=None):
        user = self.get_object()
        try:
            user = deactivate_user(user=user, acting_user=request.user)
        except UserAdminError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(UserSerializer(user).data, status=status.HTTP_200_OK)

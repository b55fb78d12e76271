# users/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from users.views import LoginView, MeView, UserAdminViewSet

router = SimpleRouter()
router.register("users", UserAdminViewSet, basename="user")

urlpatterns = [
    # ---------------- PUBLIC AUTH ----------------
    path("login/", LoginView.as_view(), name="login"),
    # ---------------- AUTHENTICATED ----------------
    path("me/", MeView.as_view(), name="me"),
    # ---------------- ADMIN ----------------
    path("", include(router.urls)),
]

# firms/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from firms.views import FirmViewSet

router = SimpleRouter()
router.register("", FirmViewSet, basename="firm")

urlpatterns = [
    path("", include(router.urls)),
]

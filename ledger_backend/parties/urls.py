# parties/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from parties.views import LocationGroupViewSet, PartyViewSet

router = SimpleRouter()
router.register("location-groups", LocationGroupViewSet, basename="location-group")
router.register("", PartyViewSet, basename="party")

urlpatterns = [
    path("", include(router.urls)),
]

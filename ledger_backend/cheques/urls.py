# cheques/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from cheques.views import ChequeViewSet

router = SimpleRouter()
router.register("", ChequeViewSet, basename="cheque")

urlpatterns = [
    path("", include(router.urls)),
]

# bills/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from bills.views import BillTextParseView, BillViewSet

router = SimpleRouter()
router.register("", BillViewSet, basename="bill")

urlpatterns = [
    path("parse-text/", BillTextParseView.as_view(), name="bill-parse-text"),
    path("", include(router.urls)),
]

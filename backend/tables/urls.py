from django.urls import path, include
from rest_framework import routers
from .views import TableViewSet, TableByQRCodeView

app_name = "tables"

router = routers.DefaultRouter()
router.register(r"tables", TableViewSet, basename="table")

urlpatterns = [
    path("tables/qr/<str:qr_code>/", TableByQRCodeView.as_view(), name="table-by-qr"),
    path("", include(router.urls)),
]

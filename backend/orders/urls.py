from django.urls import path, include
from rest_framework import routers
from .views import OrderViewSet

app_name = "orders"

router = routers.DefaultRouter(trailing_slash=False)
router.register(r"orders", OrderViewSet, basename="order")

urlpatterns = [
    path("", include(router.urls)),
]

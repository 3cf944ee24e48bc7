from django.urls import path, include
from rest_framework import routers
from .views import DeliveryViewSet

app_name = "delivery"

router = routers.SimpleRouter(trailing_slash=False)
router.register(r"delivery", DeliveryViewSet, basename="delivery")

urlpatterns = [
    path("", include(router.urls)),
]

from django.urls import path, include
from rest_framework import routers
from .views import GroupOrderViewSet

app_name = "group_orders"

router = routers.SimpleRouter(trailing_slash=False)
router.register(r"group", GroupOrderViewSet, basename="group")

urlpatterns = [
    path("", include(router.urls)),
]

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import RestaurantViewSet

router = DefaultRouter(trailing_slash=False)
router.register(r"restaurants", RestaurantViewSet, basename="restaurant")

urlpatterns = [
    path("", include(router.urls)),
]

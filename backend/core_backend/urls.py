"""
URL configuration for core_backend project.

Every app registers its own router without trailing slashes; they are all
mounted under /api/.
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse


def health_check(request):
    """Simple health check endpoint that doesn't require authentication"""
    return JsonResponse({"status": "ok", "message": "Backend is running"})


urlpatterns = [
    path("api/health", health_check, name="health_check"),
    path("admin/", admin.site.urls),
    path("api/auth/", include("users.urls")),
    path("api/menu/", include("restaurants.urls")),
    path("api/", include("orders.urls")),
    path("api/", include("delivery.urls")),
    path("api/", include("group_orders.urls")),
    path("api/", include("wallets.urls")),
    path("api/", include("payments.urls")),
]

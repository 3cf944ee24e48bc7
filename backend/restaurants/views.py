from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .models import Restaurant, MenuItem
from .serializers import RestaurantSerializer, MenuItemSerializer


class RestaurantViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Public menu browsing. Restaurant and menu management happen in the admin.
    """

    serializer_class = RestaurantSerializer
    permission_classes = [AllowAny]
    authentication_classes = []
    queryset = Restaurant.objects.filter(is_active=True)

    @action(detail=True, methods=["get"], url_path="items")
    def items(self, request, pk=None):
        restaurant = self.get_object()
        queryset = MenuItem.objects.filter(restaurant=restaurant)
        if request.query_params.get("available") in ("1", "true"):
            queryset = queryset.filter(is_available=True)
        return Response(MenuItemSerializer(queryset, many=True).data)

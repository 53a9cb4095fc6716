from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters, generics
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.common.mixins import OwnerMixin
from apps.restaurants import services
from apps.restaurants.models import Restaurant
from apps.restaurants.serializers import (
    DishAvailabilitySerializer,
    OwnerDishSerializer,
    OwnerRegisterSerializer,
    OwnerRestaurantSerializer,
    RestaurantDetailSerializer,
    RestaurantListSerializer,
)


@extend_schema_view(get=extend_schema(summary="Browse restaurants", tags=["restaurants"]))
class RestaurantListView(generics.ListAPIView):
    serializer_class = RestaurantListSerializer
    permission_classes = [AllowAny]
    authentication_classes = []
    filter_backends = [*generics.ListAPIView.filter_backends, filters.SearchFilter]
    filterset_fields = ["cuisine"]
    search_fields = ["name", "cuisine"]

    def get_queryset(self):
        return Restaurant.objects.listed().order_by("name")


@extend_schema_view(get=extend_schema(summary="Restaurant with its available dishes", tags=["restaurants"]))
class RestaurantDetailView(generics.RetrieveAPIView):
    serializer_class = RestaurantDetailSerializer
    permission_classes = [AllowAny]
    authentication_classes = []
    lookup_url_kwarg = "restaurant_id"
    queryset = Restaurant.objects.listed()


@extend_schema(summary="Register a restaurant owner with their first restaurant", tags=["owners"])
class OwnerRegisterView(generics.CreateAPIView):
    serializer_class = OwnerRegisterSerializer
    permission_classes = [AllowAny]
    authentication_classes = []


@extend_schema_view(
    get=extend_schema(summary="Owner: My restaurant", tags=["owners"]),
    patch=extend_schema(summary="Owner: Rename or update my restaurant", tags=["owners"]),
)
class OwnerRestaurantView(OwnerMixin, generics.RetrieveUpdateAPIView):
    serializer_class = OwnerRestaurantSerializer
    http_method_names = ["get", "patch", "head", "options"]

    def get_object(self):
        return self.get_restaurant()


@extend_schema_view(
    get=extend_schema(summary="Owner: Dishes on my menu", description="Includes unavailable dishes.", tags=["owners"]),
    post=extend_schema(summary="Owner: Add a dish", tags=["owners"]),
)
class OwnerDishListCreateView(OwnerMixin, generics.ListCreateAPIView):
    serializer_class = OwnerDishSerializer

    def get_queryset(self):
        return self.get_restaurant().dishes.listed().order_by("name")

    def perform_create(self, serializer):
        serializer.save(restaurant=self.get_restaurant())


@extend_schema_view(
    get=extend_schema(summary="Owner: Dish details", tags=["owners"]),
    patch=extend_schema(summary="Owner: Update a dish", tags=["owners"]),
    delete=extend_schema(
        summary="Owner: Remove a dish from the menu",
        description="Refused while a pending or paid order still contains the dish.",
        tags=["owners"],
    ),
)
class OwnerDishDetailView(OwnerMixin, generics.RetrieveUpdateDestroyAPIView):
    serializer_class = OwnerDishSerializer
    lookup_url_kwarg = "dish_id"
    http_method_names = ["get", "patch", "delete", "head", "options"]

    def get_queryset(self):
        return self.get_restaurant().dishes.listed()

    def perform_destroy(self, instance):
        services.delist_dish(instance)


class OwnerDishAvailabilityView(OwnerMixin, generics.GenericAPIView):
    serializer_class = DishAvailabilitySerializer

    @extend_schema(
        summary="Owner: Toggle dish availability",
        request=DishAvailabilitySerializer,
        responses={200: OwnerDishSerializer},
        tags=["owners"],
    )
    def patch(self, request, dish_id):
        dish = get_object_or_404(self.get_restaurant().dishes.listed(), id=dish_id)
        serializer = DishAvailabilitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dish = services.set_dish_availability(dish, serializer.validated_data["is_available"])
        return Response(OwnerDishSerializer(dish).data)

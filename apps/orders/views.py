from django.conf import settings
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.common.constants import OrderStatus
from apps.common.mixins import CustomerMixin, CustomerOrOwnerMixin, OwnerMixin
from apps.common.pagination import OrderPagination
from apps.common.utils import is_restaurant_owner
from apps.orders import services
from apps.orders.serializers import (
    GuestOrderCreateSerializer,
    OrderCancelSerializer,
    OrderCreateSerializer,
    OrderDetailSerializer,
    OrderListSerializer,
    OrderStatusUpdateSerializer,
    RestaurantOrderSerializer,
    RestaurantOrderStatsSerializer,
    UserOrderStatsSerializer,
)

ORDER_LIST_PARAMETERS = [
    OpenApiParameter(
        name="status",
        type=str,
        location=OpenApiParameter.QUERY,
        required=False,
        enum=OrderStatus.values,
    ),
]


def _place_order(request, serializer, guest_info=None):
    data = serializer.validated_data
    fee = settings.ORDER_PLATFORM_FEE
    user_id = request.user.id if request.user.is_authenticated else None
    order = services.create_order(
        user_id,
        data["items"],
        total=data["subtotal"] + fee,
        delivery_address=data["delivery_address"],
        delivery_phone=data["delivery_phone"],
        delivery_type=data["delivery_type"],
        restaurant_instructions=data.get("restaurant_instructions"),
        platform_fee=fee,
        guest_info=guest_info,
        order_details=data["order_details"],
    )
    order = services.get_order_by_id(order.id, is_owner=True)
    return Response(OrderDetailSerializer(order).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    get=extend_schema(
        summary="Customer: Get my orders",
        parameters=ORDER_LIST_PARAMETERS,
        responses={200: OrderListSerializer(many=True)},
        tags=["orders"],
    ),
    post=extend_schema(
        summary="Customer: Place an order",
        description="Prices come from the current dishes. A flat platform fee is added to the total.",
        request=OrderCreateSerializer,
        responses={201: OrderDetailSerializer},
        tags=["orders"],
    ),
)
class OrderListCreateView(CustomerMixin, GenericAPIView):
    serializer_class = OrderCreateSerializer
    pagination_class = OrderPagination

    def get(self, request):
        orders = services.get_user_orders(request.user.id, {"status": request.query_params.get("status")})
        page = self.paginate_queryset(orders)
        return self.get_paginated_response(OrderListSerializer(page, many=True).data)

    def post(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return _place_order(request, serializer)


@extend_schema(
    summary="Guest checkout",
    description="Places an order without an account. A signed-in caller's cart is still cleared.",
    request=GuestOrderCreateSerializer,
    responses={201: OrderDetailSerializer},
    tags=["orders"],
)
class GuestOrderCreateView(GenericAPIView):
    permission_classes = [AllowAny]
    serializer_class = GuestOrderCreateSerializer

    def post(self, request):
        serializer = GuestOrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        guest_info = {
            "name": serializer.validated_data["guest_name"],
            "email": serializer.validated_data["guest_email"],
        }
        return _place_order(request, serializer, guest_info=guest_info)


@extend_schema(summary="Customer: My order statistics", responses={200: UserOrderStatsSerializer}, tags=["orders"])
class OrderStatsView(CustomerMixin, GenericAPIView):
    serializer_class = UserOrderStatsSerializer

    def get(self, request):
        stats = services.get_user_order_stats(request.user.id)
        return Response(UserOrderStatsSerializer(stats).data)


@extend_schema(summary="Order details", responses={200: OrderDetailSerializer}, tags=["orders"])
class OrderDetailView(CustomerOrOwnerMixin, GenericAPIView):
    serializer_class = OrderDetailSerializer

    def get(self, request, order_id):
        order = services.get_order_by_id(
            order_id,
            user_id=request.user.id,
            is_owner=is_restaurant_owner(request.user),
        )
        return Response(OrderDetailSerializer(order).data)


class OrderCancelView(CustomerMixin, GenericAPIView):
    serializer_class = OrderCancelSerializer

    @extend_schema(
        summary="Customer: Cancel my order",
        description="Only pending, confirmed or preparing orders can be cancelled.",
        request=OrderCancelSerializer,
        responses={200: OrderDetailSerializer},
        tags=["orders"],
    )
    def patch(self, request, order_id):
        serializer = OrderCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.cancel_order(order_id, request.user.id, serializer.validated_data.get("reason"))
        order = services.get_order_by_id(order_id, user_id=request.user.id)
        return Response(OrderDetailSerializer(order).data)


@extend_schema(
    summary="Owner: Orders for my restaurant",
    description="Each order only lists the lines of the selected restaurant (`?restaurant=<uuid>`).",
    parameters=ORDER_LIST_PARAMETERS,
    responses={200: RestaurantOrderSerializer(many=True)},
    tags=["orders"],
)
class RestaurantOrderListView(OwnerMixin, GenericAPIView):
    serializer_class = RestaurantOrderSerializer
    pagination_class = OrderPagination

    def get(self, request):
        restaurant = self.get_restaurant()
        orders = services.get_restaurant_orders(restaurant.id, {"status": request.query_params.get("status")})
        page = self.paginate_queryset(orders)
        return self.get_paginated_response(RestaurantOrderSerializer(page, many=True).data)


@extend_schema(
    summary="Owner: Restaurant order statistics",
    responses={200: RestaurantOrderStatsSerializer},
    tags=["orders"],
)
class RestaurantOrderStatsView(OwnerMixin, GenericAPIView):
    serializer_class = RestaurantOrderStatsSerializer

    def get(self, request):
        stats = services.get_restaurant_order_stats(self.get_restaurant().id)
        return Response(RestaurantOrderStatsSerializer(stats).data)


class OrderStatusUpdateView(OwnerMixin, GenericAPIView):
    serializer_class = OrderStatusUpdateSerializer

    @extend_schema(
        summary="Owner: Update order status",
        request=OrderStatusUpdateSerializer,
        responses={200: OrderDetailSerializer},
        tags=["orders"],
    )
    def patch(self, request, order_id):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        restaurant = self.get_restaurant()
        services.update_order_status(order_id, serializer.validated_data["status"], restaurant_id=restaurant.id)
        order = services.get_order_by_id(order_id, is_owner=True)
        return Response(OrderDetailSerializer(order).data)

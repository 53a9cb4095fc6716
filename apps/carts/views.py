from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.response import Response

from apps.carts import services
from apps.carts.serializers import CartAddSerializer, CartItemSerializer
from apps.common.mixins import CustomerMixin


class CartView(CustomerMixin, GenericAPIView):
    serializer_class = CartItemSerializer

    @extend_schema(summary="Customer: Get my cart", responses={200: CartItemSerializer(many=True)}, tags=["cart"])
    def get(self, request):
        items = services.get_cart(request.user.id)
        return Response(CartItemSerializer(items, many=True).data)

    @extend_schema(
        summary="Customer: Add a dish to my cart",
        request=CartAddSerializer,
        responses={201: CartItemSerializer},
        tags=["cart"],
    )
    def post(self, request):
        serializer = CartAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = services.add_to_cart(
            request.user.id,
            serializer.validated_data["dish_id"],
            serializer.validated_data["quantity"],
        )
        return Response(CartItemSerializer(item).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Customer: Clear my cart", responses={204: None}, tags=["cart"])
    def delete(self, request):
        services.clear_cart(request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(summary="Customer: Remove a dish from my cart", responses={204: None}, tags=["cart"])
class CartItemView(CustomerMixin, GenericAPIView):
    serializer_class = CartItemSerializer

    def delete(self, request, dish_id):
        services.remove_from_cart(request.user.id, dish_id)
        return Response(status=status.HTTP_204_NO_CONTENT)

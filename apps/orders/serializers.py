from decimal import Decimal

from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from apps.common.constants import DeliveryType
from apps.orders.models import Order, OrderItem, RestaurantPayment
from apps.restaurants.models import Dish


class OrderLineSerializer(serializers.Serializer):
    dish_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class OrderCreateSerializer(serializers.Serializer):
    """
    Checkout payload. Prices are never taken from the client: each line is resolved to
    the current ``Dish`` and snapshotted into ``validated_data["items"]``.
    """

    items = OrderLineSerializer(many=True, allow_empty=False)
    delivery_address = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    delivery_phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default="")
    delivery_type = serializers.ChoiceField(choices=DeliveryType.choices, default=DeliveryType.DELIVERY)
    restaurant_instructions = serializers.JSONField(required=False, allow_null=True, default=None)
    order_details = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        lines = attrs["items"]
        dish_ids = {line["dish_id"] for line in lines}
        dishes = {
            dish.id: dish
            for dish in Dish.objects.listed().filter(id__in=dish_ids, restaurant__is_active=True)
        }

        items = []
        subtotal = Decimal("0.00")
        for line in lines:
            dish = dishes.get(line["dish_id"])
            if dish is None:
                raise serializers.ValidationError({"items": f"Dish {line['dish_id']} does not exist."})
            if not dish.is_available:
                raise serializers.ValidationError({"items": f"{dish.name} is currently unavailable."})

            items.append(
                {
                    "dish_id": dish.id,
                    "name": dish.name,
                    "price": dish.price,
                    "quantity": line["quantity"],
                    "restaurant_id": dish.restaurant_id,
                }
            )
            subtotal += dish.price * line["quantity"]

        if attrs["delivery_type"] == DeliveryType.DELIVERY and not attrs.get("delivery_address"):
            raise serializers.ValidationError({"delivery_address": "Delivery address is required for delivery."})

        attrs["items"] = items
        attrs["subtotal"] = subtotal
        return attrs


class GuestOrderCreateSerializer(OrderCreateSerializer):
    guest_name = serializers.CharField(max_length=120)
    guest_email = serializers.EmailField()


class OrderItemSerializer(serializers.ModelSerializer):
    restaurant_id = serializers.UUIDField(read_only=True)
    dish_id = serializers.UUIDField(read_only=True, allow_null=True)
    restaurant_name = serializers.CharField(source="restaurant.name", read_only=True)
    restaurant_phone = serializers.CharField(source="restaurant.phone_number", read_only=True)
    restaurant_address = serializers.CharField(source="restaurant.address", read_only=True)
    image_url = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "dish_id",
            "name",
            "price",
            "quantity",
            "restaurant_id",
            "restaurant_name",
            "restaurant_phone",
            "restaurant_address",
            "image_url",
        ]

    def get_image_url(self, obj):
        # display only; the snapshot itself never changes
        return obj.dish.image_url if obj.dish_id else None


class RestaurantPaymentSerializer(serializers.ModelSerializer):
    restaurant_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = RestaurantPayment
        fields = ["restaurant_id", "amount", "order_fee", "status", "paid_at"]


class OrderDetailSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    payments = RestaurantPaymentSerializer(source="restaurant_payments", many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "status",
            "total",
            "platform_fee",
            "order_details",
            "delivery_address",
            "delivery_phone",
            "delivery_type",
            "restaurant_instructions",
            "is_guest_order",
            "guest_name",
            "guest_email",
            "paid_at",
            "created_at",
            "items",
            "payments",
        ]


class OrderListSerializer(serializers.ModelSerializer):
    item_count = serializers.IntegerField(read_only=True)
    restaurant_names = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "status",
            "total",
            "delivery_type",
            "created_at",
            "item_count",
            "restaurant_names",
        ]

    @extend_schema_field(serializers.ListField(child=serializers.CharField()))
    def get_restaurant_names(self, obj):
        return sorted({item.restaurant.name for item in obj.restaurant_items})


class RestaurantOrderItemSerializer(serializers.ModelSerializer):
    dish_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = OrderItem
        fields = ["id", "dish_id", "name", "price", "quantity"]


class RestaurantOrderSerializer(serializers.ModelSerializer):
    items = RestaurantOrderItemSerializer(source="restaurant_items", many=True, read_only=True)
    restaurant_subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    customer_name = serializers.CharField(read_only=True)
    customer_email = serializers.CharField(read_only=True)
    customer_phone = serializers.CharField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "status",
            "total",
            "delivery_address",
            "delivery_type",
            "restaurant_instructions",
            "order_details",
            "is_guest_order",
            "customer_name",
            "customer_email",
            "customer_phone",
            "restaurant_subtotal",
            "items",
            "created_at",
        ]


class OrderStatusUpdateSerializer(serializers.Serializer):
    # allow-list is enforced by the service so every caller gets the same error
    status = serializers.CharField(max_length=20)


class OrderCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)


class UserOrderStatsSerializer(serializers.Serializer):
    total_orders = serializers.IntegerField()
    delivered_orders = serializers.IntegerField()
    cancelled_orders = serializers.IntegerField()
    total_spent = serializers.DecimalField(max_digits=12, decimal_places=2)
    avg_order_value = serializers.DecimalField(max_digits=12, decimal_places=2)
    last_order_date = serializers.DateTimeField(allow_null=True)


class RestaurantOrderStatsSerializer(serializers.Serializer):
    total_orders = serializers.IntegerField()
    delivered_orders = serializers.IntegerField()
    active_orders = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=12, decimal_places=2)
    avg_order_value = serializers.DecimalField(max_digits=12, decimal_places=2)

from rest_framework import serializers

from apps.carts.models import CartItem


class CartItemSerializer(serializers.ModelSerializer):
    dish_id = serializers.UUIDField(source="dish.id", read_only=True)
    name = serializers.CharField(source="dish.name", read_only=True)
    price = serializers.DecimalField(source="dish.price", max_digits=10, decimal_places=2, read_only=True)
    restaurant_id = serializers.UUIDField(source="dish.restaurant_id", read_only=True)
    restaurant_name = serializers.CharField(source="dish.restaurant.name", read_only=True)

    class Meta:
        model = CartItem
        fields = ["id", "dish_id", "name", "price", "quantity", "restaurant_id", "restaurant_name"]


class CartAddSerializer(serializers.Serializer):
    dish_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)

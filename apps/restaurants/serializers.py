from decimal import Decimal

from django.contrib.auth import get_user_model, password_validation
from django.db import transaction
from rest_framework import serializers

from apps.authentication.utils import issue_token_pair
from apps.common.constants import UserRole
from apps.restaurants.models import Dish, Restaurant, RestaurantOwner

User = get_user_model()


class DishSerializer(serializers.ModelSerializer):
    class Meta:
        model = Dish
        fields = ["id", "name", "description", "price", "image_url", "is_available"]


class RestaurantListSerializer(serializers.ModelSerializer):
    class Meta:
        model = Restaurant
        fields = ["id", "name", "address", "phone_number", "cuisine", "image_url"]


class RestaurantDetailSerializer(serializers.ModelSerializer):
    dishes = serializers.SerializerMethodField()

    class Meta:
        model = Restaurant
        fields = ["id", "name", "address", "phone_number", "cuisine", "description", "image_url", "dishes"]

    def get_dishes(self, obj):
        dishes = obj.dishes.listed().filter(is_available=True)
        return DishSerializer(dishes, many=True).data


class OwnerRegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8)
    name = serializers.CharField(max_length=120)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    restaurant_name = serializers.CharField(max_length=150)
    restaurant_address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    restaurant_phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    cuisine = serializers.CharField(max_length=80, required=False, allow_blank=True)

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("An account with this email already exists.")
        return value

    def validate_password(self, value):
        password_validation.validate_password(value)
        return value

    @transaction.atomic
    def create(self, validated_data):
        user = User.objects.create_user(
            email=validated_data["email"],
            password=validated_data["password"],
            name=validated_data["name"],
            phone=validated_data.get("phone", ""),
            role=UserRole.OWNER,
        )
        owner = RestaurantOwner.objects.create(user=user)
        Restaurant.objects.create(
            owner=owner,
            name=validated_data["restaurant_name"],
            address=validated_data.get("restaurant_address", ""),
            phone_number=validated_data.get("restaurant_phone", ""),
            cuisine=validated_data.get("cuisine", ""),
        )
        return owner

    def to_representation(self, instance):
        restaurant = instance.restaurants.first()
        return {
            "owner_id": str(instance.id),
            "email": instance.email,
            "restaurant": RestaurantListSerializer(restaurant).data if restaurant else None,
            **issue_token_pair(instance.user),
        }


class OwnerDishSerializer(serializers.ModelSerializer):
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.00"))

    class Meta:
        model = Dish
        fields = ["id", "name", "description", "price", "image_url", "is_available", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError("Dish name is required.")
        return value.strip()


class DishAvailabilitySerializer(serializers.Serializer):
    is_available = serializers.BooleanField()


class OwnerRestaurantSerializer(serializers.ModelSerializer):
    name = serializers.CharField(max_length=100)

    class Meta:
        model = Restaurant
        fields = ["id", "name", "address", "phone_number", "cuisine", "description", "image_url", "needs_onboarding"]
        read_only_fields = ["id", "needs_onboarding"]

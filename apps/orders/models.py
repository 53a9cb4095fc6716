from decimal import Decimal

from django.db import models

from apps.common.constants import DeliveryType, OrderStatus, PaymentShareStatus
from apps.common.models import BaseModel
from apps.restaurants.models import Dish, Restaurant
from apps.users.models import User


class Order(BaseModel):
    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
        db_column="user_id",
    )
    total = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING)
    order_details = models.TextField(blank=True, default="")
    delivery_address = models.CharField(max_length=255, blank=True)
    delivery_phone = models.CharField(max_length=30, blank=True)
    delivery_type = models.CharField(max_length=10, choices=DeliveryType.choices, default=DeliveryType.DELIVERY)
    restaurant_instructions = models.JSONField(null=True, blank=True)
    platform_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    guest_name = models.CharField(max_length=120, null=True, blank=True)
    guest_email = models.EmailField(null=True, blank=True)
    is_guest_order = models.BooleanField(default=False)
    paid_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user"]),
            models.Index(fields=["status"]),
            models.Index(fields=["created_at"]),
        ]

    @property
    def customer_name(self):
        return self.user.name if self.user_id else self.guest_name

    @property
    def customer_email(self):
        return self.user.email if self.user_id else self.guest_email

    @property
    def customer_phone(self):
        if self.user_id and self.user.phone:
            return self.user.phone
        return self.delivery_phone

    def __str__(self):
        who = self.guest_email if self.is_guest_order else self.user
        return f"{self.id} • {who} • {self.status}"


class OrderItem(BaseModel):
    """
    Snapshot of a dish at checkout. ``name`` and ``price`` are copied from the dish
    and never follow later menu edits.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
        db_column="order_id",
    )
    dish = models.ForeignKey(
        Dish,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
        db_column="dish_id",
    )
    restaurant = models.ForeignKey(
        Restaurant,
        on_delete=models.PROTECT,
        related_name="order_items",
        db_column="restaurant_id",
    )
    name = models.CharField(max_length=150)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField()

    class Meta:
        db_table = "order_items"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["order"]),
            models.Index(fields=["restaurant"]),
        ]

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def __str__(self):
        return f"{self.order_id} · {self.name} × {self.quantity}"


class RestaurantPayment(BaseModel):
    """
    One restaurant's share of an order. Each share is charged through its own payment
    intent; the order is paid once every share is.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="restaurant_payments",
        db_column="order_id",
    )
    restaurant = models.ForeignKey(
        Restaurant,
        on_delete=models.PROTECT,
        related_name="payments",
        db_column="restaurant_id",
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    # flat order fee, carried by exactly one share of the order
    order_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    status = models.CharField(max_length=20, choices=PaymentShareStatus.choices, default=PaymentShareStatus.PENDING)
    stripe_payment_intent_id = models.CharField(max_length=255, null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "restaurant_payments"
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(fields=["order", "restaurant"], name="unique_restaurant_payment_per_order"),
        ]
        indexes = [
            models.Index(fields=["stripe_payment_intent_id"]),
        ]

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentShareStatus.PAID

    def __str__(self):
        return f"{self.order_id} · {self.restaurant_id} · {self.status}"

from django.db import models


class UserRole(models.TextChoices):
    CUSTOMER = "customer", "Customer"
    OWNER = "owner", "Restaurant owner"
    ADMIN = "admin", "Administrator"


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    RECEIVED = "received", "Received"
    CONFIRMED = "confirmed", "Confirmed"
    PREPARING = "preparing", "Preparing"
    READY = "ready", "Ready"
    OUT_FOR_DELIVERY = "out_for_delivery", "Out for delivery"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"

    @classmethod
    def is_valid(cls, value) -> bool:
        return value in cls.values

    @classmethod
    def cancellable(cls):
        return [cls.PENDING, cls.CONFIRMED, cls.PREPARING]

    @classmethod
    def active(cls):
        return [cls.PENDING, cls.CONFIRMED, cls.PREPARING]


class DeliveryType(models.TextChoices):
    DELIVERY = "delivery", "Delivery"
    PICKUP = "pickup", "Pickup"


class PaymentShareStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"

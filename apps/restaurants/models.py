from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from apps.common.models import BaseModel, ListedModel
from apps.users.models import User


class RestaurantOwner(BaseModel):
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="restaurant_owner",
        db_column="user_id",
    )
    # billing side: the owner pays the platform a monthly subscription
    stripe_customer_id = models.CharField(max_length=255, null=True, blank=True)
    is_subscribed = models.BooleanField(default=False)
    # payout side: the connected account receiving order transfers
    stripe_account_id = models.CharField(max_length=255, null=True, blank=True)

    class Meta:
        db_table = "restaurant_owners"

    @property
    def email(self):
        return self.user.email

    @property
    def name(self):
        return self.user.name

    def __str__(self):
        return f"{self.user.email} • subscribed={self.is_subscribed}"


class Restaurant(ListedModel):
    owner = models.ForeignKey(
        RestaurantOwner,
        on_delete=models.PROTECT,
        related_name="restaurants",
        db_column="owner_id",
    )
    name = models.CharField(max_length=150)
    address = models.CharField(max_length=255, blank=True)
    phone_number = models.CharField(max_length=30, blank=True)
    cuisine = models.CharField(max_length=80, blank=True)
    description = models.TextField(blank=True)
    image_url = models.URLField(max_length=500, blank=True)
    stripe_account_id = models.CharField(max_length=255, null=True, blank=True)

    class Meta:
        db_table = "restaurants"
        indexes = [
            models.Index(fields=["owner"]),
            models.Index(fields=["name"]),
        ]

    @property
    def needs_onboarding(self) -> bool:
        return not self.stripe_account_id

    def __str__(self):
        return self.name


class Dish(ListedModel):
    restaurant = models.ForeignKey(
        Restaurant,
        on_delete=models.CASCADE,
        related_name="dishes",
        db_column="restaurant_id",
    )
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    image_url = models.URLField(max_length=500, blank=True)
    is_available = models.BooleanField(default=True)

    class Meta:
        db_table = "dishes"
        verbose_name_plural = "dishes"
        indexes = [
            models.Index(fields=["restaurant"]),
        ]
        ordering = ["restaurant", "name"]

    def __str__(self):
        return f"{self.restaurant} · {self.name}"

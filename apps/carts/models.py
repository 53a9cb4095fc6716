from django.core.validators import MinValueValidator
from django.db import models

from apps.common.models import BaseModel
from apps.restaurants.models import Dish
from apps.users.models import User


class CartItem(BaseModel):
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="cart_items",
        db_column="user_id",
    )
    dish = models.ForeignKey(
        Dish,
        on_delete=models.CASCADE,
        related_name="cart_items",
        db_column="dish_id",
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    class Meta:
        db_table = "carts"
        unique_together = [("user", "dish")]
        indexes = [models.Index(fields=["user"])]

    def __str__(self):
        return f"{self.user} · {self.dish.name} × {self.quantity}"

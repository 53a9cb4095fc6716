import logging

from django.db import transaction
from django.db.models import F

from apps.carts.models import CartItem
from apps.common.exceptions import InvalidInput, ResourceNotFound
from apps.restaurants.models import Dish

logger = logging.getLogger(__name__)


def get_cart(user_id):
    return (
        CartItem.objects.filter(user_id=user_id)
        .select_related("dish", "dish__restaurant")
        .order_by("created_at")
    )


@transaction.atomic
def add_to_cart(user_id, dish_id, quantity: int) -> CartItem:
    """Add a dish to the cart, or bump its quantity when it is already there."""
    if quantity < 1:
        raise InvalidInput("Quantity must be at least 1", {"field": "quantity"})

    try:
        dish = Dish.objects.listed().get(id=dish_id)
    except Dish.DoesNotExist as err:
        raise ResourceNotFound("Dish", dish_id) from err

    if not dish.is_available:
        raise InvalidInput(f"{dish.name} is currently unavailable", {"dish_id": str(dish_id)})

    item, created = CartItem.objects.select_for_update().get_or_create(
        user_id=user_id, dish=dish, defaults={"quantity": quantity}
    )
    if not created:
        CartItem.objects.filter(pk=item.pk).update(quantity=F("quantity") + quantity)
        item.refresh_from_db(fields=["quantity"])
    return item


def remove_from_cart(user_id, dish_id) -> int:
    deleted, _ = CartItem.objects.filter(user_id=user_id, dish_id=dish_id).delete()
    return deleted


def clear_cart(user_id) -> int:
    deleted, _ = CartItem.objects.filter(user_id=user_id).delete()
    logger.info(f"Cleared {deleted} cart rows for user {user_id}")
    return deleted

import logging

from django.db import transaction

from apps.carts.models import CartItem
from apps.common.constants import OrderStatus
from apps.common.exceptions import InvalidState
from apps.orders.models import OrderItem
from apps.restaurants.models import Dish

logger = logging.getLogger(__name__)

# orders the kitchen has not started on yet still need the dish on the menu
OPEN_ORDER_STATUSES = [OrderStatus.PENDING, OrderStatus.PAID]


def set_dish_availability(dish: Dish, is_available: bool) -> Dish:
    dish.is_available = is_available
    dish.save(update_fields=["is_available", "updated_at"])
    logger.info(f"Dish {dish.id} availability set to {is_available}")
    return dish


@transaction.atomic
def delist_dish(dish: Dish) -> None:
    """
    Take a dish off the menu. Order items keep their snapshot; carts drop the dish.
    Refused while an open order still contains it.
    """
    open_orders = (
        OrderItem.objects.filter(dish=dish, order__status__in=OPEN_ORDER_STATUSES)
        .values("order_id")
        .distinct()
        .count()
    )
    if open_orders:
        raise InvalidState(
            f"Dish {dish.name} is part of {open_orders} open order(s) and cannot be removed yet",
            current_state="in_open_orders",
            expected_state="no_open_orders",
        )

    dish.delist()
    removed, _ = CartItem.objects.filter(dish=dish).delete()
    logger.info(f"Dish {dish.id} delisted from restaurant {dish.restaurant_id} ({removed} cart rows removed)")

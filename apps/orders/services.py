import logging
from decimal import ROUND_HALF_UP, Decimal

from django.db import DatabaseError, transaction
from django.db.models import (
    Avg,
    Count,
    DecimalField,
    ExpressionWrapper,
    F,
    Max,
    Prefetch,
    Q,
    Sum,
    Value,
)
from django.db.models.functions import Coalesce, Concat
from django.utils import timezone

from apps.carts.models import CartItem
from apps.common.constants import DeliveryType, OrderStatus, PaymentShareStatus
from apps.common.exceptions import DatabaseFailure, Forbidden, InvalidInput, InvalidState, ResourceNotFound
from apps.orders.models import Order, OrderItem, RestaurantPayment

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
DEFAULT_CANCELLATION_REASON = "Customer requested"

LINE_TOTAL = ExpressionWrapper(F("price") * F("quantity"), output_field=DecimalField(max_digits=12, decimal_places=2))


def _quantize(amount) -> Decimal:
    if amount is None:
        return Decimal("0.00")
    return Decimal(str(amount)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def validate_status(status) -> str:
    if not OrderStatus.is_valid(status):
        raise InvalidInput(
            f"Invalid status: {status}",
            {"field": "status", "allowed": list(OrderStatus.values)},
        )
    return status


def _restaurant_shares(order: Order, items) -> list[RestaurantPayment]:
    """One payment share per restaurant; the first restaurant in the basket also carries the order fee."""
    subtotals = {}
    for item in items:
        line = _quantize(item["price"]) * int(item["quantity"])
        subtotals[item["restaurant_id"]] = subtotals.get(item["restaurant_id"], Decimal("0.00")) + line

    shares = []
    for position, (restaurant_id, subtotal) in enumerate(subtotals.items()):
        shares.append(
            RestaurantPayment(
                order=order,
                restaurant_id=restaurant_id,
                amount=_quantize(subtotal),
                order_fee=order.platform_fee if position == 0 else Decimal("0.00"),
            )
        )
    return shares


def create_order(
    user_id,
    items,
    total,
    delivery_address,
    delivery_phone,
    delivery_type=DeliveryType.DELIVERY,
    restaurant_instructions=None,
    platform_fee=Decimal("0.00"),
    guest_info=None,
    order_details="",
) -> Order:
    """
    Persist an order and its item snapshots in one transaction.

    ``items`` are dicts with ``dish_id``, ``name``, ``price``, ``quantity`` and ``restaurant_id``.
    With ``guest_info`` (``name``/``email``) the order is stored without a user. The
    supplied user's cart is emptied in the same transaction either way.
    """
    if not items:
        raise InvalidInput("Order must contain at least one item", {"field": "items"})

    for item in items:
        if int(item["quantity"]) < 1:
            raise InvalidInput("Item quantity must be at least 1", {"dish_id": str(item.get("dish_id"))})

    is_guest = bool(guest_info)

    try:
        with transaction.atomic():
            order = Order.objects.create(
                user_id=None if is_guest else user_id,
                total=_quantize(total),
                status=OrderStatus.PENDING,
                order_details=order_details or "",
                delivery_address=delivery_address or "",
                delivery_phone=delivery_phone or "",
                delivery_type=delivery_type,
                restaurant_instructions=restaurant_instructions,
                platform_fee=_quantize(platform_fee),
                guest_name=guest_info.get("name") if is_guest else None,
                guest_email=guest_info.get("email") if is_guest else None,
                is_guest_order=is_guest,
            )
            OrderItem.objects.bulk_create(
                [
                    OrderItem(
                        order=order,
                        dish_id=item.get("dish_id"),
                        name=item["name"],
                        price=_quantize(item["price"]),
                        quantity=int(item["quantity"]),
                        restaurant_id=item["restaurant_id"],
                    )
                    for item in items
                ]
            )
            RestaurantPayment.objects.bulk_create(_restaurant_shares(order, items))
            if user_id:
                CartItem.objects.filter(user_id=user_id).delete()
    except DatabaseError as err:
        logger.error(f"Order creation failed for user {user_id}: {err}")
        raise DatabaseFailure("Failed to create order", {"reason": str(err)}) from err

    logger.info(f"Order {order.id} created with {len(items)} items (guest={is_guest}, total={order.total})")
    return order


def get_order_by_id(order_id, user_id=None, is_owner: bool = False) -> Order:
    items = OrderItem.objects.select_related("restaurant", "dish").order_by("created_at")
    order = (
        Order.objects.select_related("user")
        .prefetch_related(Prefetch("items", queryset=items), "restaurant_payments")
        .filter(id=order_id)
        .first()
    )
    if order is None:
        raise ResourceNotFound("Order", order_id)

    if not is_owner and (order.user_id is None or str(order.user_id) != str(user_id)):
        raise Forbidden("You do not have access to this order")
    return order


def get_user_orders(user_id, filters=None):
    """
    The customer's orders, newest first, each with ``item_count`` and its items prefetched
    as ``restaurant_items``. The caller paginates (one count, then one page).
    """
    filters = filters or {}
    qs = Order.objects.filter(user_id=user_id)
    if filters.get("status"):
        qs = qs.filter(status=validate_status(filters["status"]))

    return (
        qs.annotate(item_count=Count("items"))
        .prefetch_related(
            Prefetch("items", queryset=OrderItem.objects.select_related("restaurant"), to_attr="restaurant_items")
        )
        .order_by("-created_at")
    )


def get_restaurant_orders(restaurant_id, filters=None):
    """Orders containing at least one item of the restaurant, each narrowed to that restaurant's lines."""
    filters = filters or {}
    qs = Order.objects.filter(items__restaurant_id=restaurant_id)
    if filters.get("status"):
        qs = qs.filter(status=validate_status(filters["status"]))

    # the items join from the filter above is reused, so the sum only covers this restaurant
    return (
        qs.annotate(
            restaurant_subtotal=Sum(
                F("items__price") * F("items__quantity"),
                output_field=DecimalField(max_digits=12, decimal_places=2),
            )
        )
        .select_related("user")
        .prefetch_related(
            Prefetch(
                "items",
                queryset=OrderItem.objects.filter(restaurant_id=restaurant_id).order_by("created_at"),
                to_attr="restaurant_items",
            )
        )
        .order_by("-created_at")
    )


def update_order_status(order_id, new_status, restaurant_id=None) -> Order:
    validate_status(new_status)

    if restaurant_id is not None:
        if not OrderItem.objects.filter(order_id=order_id, restaurant_id=restaurant_id).exists():
            raise Forbidden("This order does not contain items from your restaurant")

    # applies to the whole order, even when it spans several restaurants
    updated = Order.objects.filter(id=order_id).update(status=new_status, updated_at=timezone.now())
    if not updated:
        raise ResourceNotFound("Order", order_id)

    logger.info(f"Order {order_id} status set to {new_status} (restaurant={restaurant_id})")
    return Order.objects.get(id=order_id)


def cancel_order(order_id, user_id, reason=None) -> Order:
    order = Order.objects.filter(id=order_id).only("id", "user_id", "status").first()
    if order is None:
        raise ResourceNotFound("Order", order_id)

    if order.user_id is None or str(order.user_id) != str(user_id):
        raise Forbidden("You can only cancel your own orders")

    allowed = OrderStatus.cancellable()
    if order.status not in allowed:
        raise InvalidState(
            f"Cannot cancel order with status {order.status}",
            current_state=order.status,
            expected_state=[str(s) for s in allowed],
        )

    note = f" | Cancellation reason: {reason or DEFAULT_CANCELLATION_REASON}"
    updated = Order.objects.filter(id=order_id, status__in=allowed).update(
        status=OrderStatus.CANCELLED,
        order_details=Concat(Coalesce(F("order_details"), Value("")), Value(note)),
        updated_at=timezone.now(),
    )
    if not updated:
        # status moved on between the read and the write
        current = Order.objects.values_list("status", flat=True).get(id=order_id)
        raise InvalidState(
            f"Cannot cancel order with status {current}",
            current_state=current,
            expected_state=[str(s) for s in allowed],
        )

    logger.info(f"Order {order_id} cancelled by user {user_id}")
    return Order.objects.get(id=order_id)


def get_user_order_stats(user_id) -> dict:
    delivered = Q(status=OrderStatus.DELIVERED)
    stats = Order.objects.filter(user_id=user_id).aggregate(
        total_orders=Count("id"),
        delivered_orders=Count("id", filter=delivered),
        cancelled_orders=Count("id", filter=Q(status=OrderStatus.CANCELLED)),
        total_spent=Sum("total", filter=delivered),
        avg_order_value=Avg("total", filter=delivered),
        last_order_date=Max("created_at"),
    )
    stats["total_spent"] = _quantize(stats["total_spent"])
    stats["avg_order_value"] = _quantize(stats["avg_order_value"])
    return stats


def get_restaurant_order_stats(restaurant_id) -> dict:
    delivered = Q(order__status=OrderStatus.DELIVERED)
    stats = OrderItem.objects.filter(restaurant_id=restaurant_id).aggregate(
        total_orders=Count("order", distinct=True),
        delivered_orders=Count("order", distinct=True, filter=delivered),
        active_orders=Count("order", distinct=True, filter=Q(order__status__in=OrderStatus.active())),
        total_revenue=Sum(LINE_TOTAL, filter=delivered),
        avg_order_value=Avg(LINE_TOTAL, filter=delivered),
    )
    stats["total_revenue"] = _quantize(stats["total_revenue"])
    stats["avg_order_value"] = _quantize(stats["avg_order_value"])
    return stats


def get_order_restaurant_subtotal(order_id, restaurant_id) -> Decimal:
    subtotal = OrderItem.objects.filter(order_id=order_id, restaurant_id=restaurant_id).aggregate(
        subtotal=Sum(LINE_TOTAL)
    )["subtotal"]
    return _quantize(subtotal)


def get_restaurant_payment(order_id, restaurant_id) -> RestaurantPayment:
    share = RestaurantPayment.objects.filter(order_id=order_id, restaurant_id=restaurant_id).first()
    if share is None:
        raise InvalidInput("Order has no items from this restaurant", {"restaurant_id": str(restaurant_id)})
    return share


def mark_order_paid(payment_intent_id, order_id, restaurant_id=None) -> bool:
    """
    Record a succeeded payment intent against its restaurant share. The order turns ``paid``
    only once no share is left unpaid. Returns True when this call moved the order to paid.

    The share is found by ``restaurant_id`` when given, else by the intent id stored on it.
    """
    if not Order.objects.filter(id=order_id).exists():
        raise ResourceNotFound("Order", order_id)

    shares = RestaurantPayment.objects.filter(order_id=order_id)
    if restaurant_id:
        share = shares.filter(restaurant_id=restaurant_id)
    else:
        share = shares.filter(stripe_payment_intent_id=payment_intent_id)

    now = timezone.now()
    with transaction.atomic():
        updated = share.filter(status=PaymentShareStatus.PENDING).update(
            status=PaymentShareStatus.PAID,
            stripe_payment_intent_id=payment_intent_id,
            paid_at=now,
            updated_at=now,
        )
        if not updated and not share.exists():
            raise ResourceNotFound("Restaurant payment", payment_intent_id)

        if shares.exclude(status=PaymentShareStatus.PAID).exists():
            logger.info(f"Order {order_id}: payment intent {payment_intent_id} recorded, other shares still unpaid")
            return False

        moved = Order.objects.filter(id=order_id, status=OrderStatus.PENDING).update(
            status=OrderStatus.PAID,
            paid_at=now,
            updated_at=now,
        )

    if moved:
        logger.info(f"Order {order_id} fully paid (last payment intent {payment_intent_id})")
    else:
        logger.info(f"Order {order_id} not pending, payment intent {payment_intent_id} left the status as is")
    return bool(moved)

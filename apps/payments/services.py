import logging
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from django.db.models import Q

from apps.common.exceptions import (
    Forbidden,
    GatewayResourceMissing,
    InvalidInput,
    InvalidState,
    OnboardingRequired,
    PaymentGatewayError,
    ResourceNotFound,
)
from apps.orders.models import RestaurantPayment
from apps.payments.gateway import PaymentGateway, get_payment_gateway
from apps.restaurants.models import Restaurant, RestaurantOwner

logger = logging.getLogger(__name__)

SUBSCRIPTION_PRODUCT_NAME = "Afro Eats Restaurant Subscription"
SUBSCRIPTION_PRODUCT_DESCRIPTION = "Monthly subscription for listing a restaurant on the marketplace"
SUBSCRIPTION_UNIT_AMOUNT = 1999
SUBSCRIPTION_PRICE_CACHE_KEY = "payments:default-subscription-price"


def compute_platform_fee(amount: int, percent=None) -> int:
    """Platform share of ``amount`` in minor units, rounded half up."""
    if percent is None:
        percent = settings.PLATFORM_FEE_PERCENT
    fee = Decimal(amount) * Decimal(percent) / Decimal(100)
    return int(fee.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def mark_owner_subscribed(owner_id, customer_id=None) -> bool:
    updates = {"is_subscribed": True}
    if customer_id:
        updates["stripe_customer_id"] = customer_id
    updated = RestaurantOwner.objects.filter(id=owner_id).update(**updates)
    if updated:
        logger.info(f"Owner {owner_id} subscribed (customer={customer_id})")
    else:
        logger.warning(f"Subscription confirmed for unknown owner {owner_id}")
    return bool(updated)


def mark_customer_unsubscribed(customer_id) -> int:
    updated = RestaurantOwner.objects.filter(stripe_customer_id=customer_id).update(is_subscribed=False)
    logger.info(f"Subscription ended for customer {customer_id} ({updated} owners updated)")
    return updated


class PaymentService:
    """
    Marketplace payment rules on top of an injected ``PaymentGateway``.

    Constructed without a gateway the service runs in demo mode: operations that can
    degrade return a ``dev_mode`` payload instead of calling the processor.
    """

    def __init__(self, gateway: PaymentGateway | None = None):
        self.gateway = gateway

    @property
    def dev_mode(self) -> bool:
        return self.gateway is None

    # Connected accounts

    def create_connected_account(self, owner: RestaurantOwner) -> dict:
        if owner.stripe_account_id:
            return {"account_id": owner.stripe_account_id, "created": False}

        if self.dev_mode:
            logger.warning(f"Stripe not configured, skipping connected account for owner {owner.id}")
            return {"account_id": None, "created": False, "dev_mode": True}

        account_id = self.gateway.create_express_account(email=owner.email, metadata={"owner_id": str(owner.id)})

        with transaction.atomic():
            RestaurantOwner.objects.filter(pk=owner.pk).update(stripe_account_id=account_id)
            owner.restaurants.filter(Q(stripe_account_id__isnull=True) | Q(stripe_account_id="")).update(
                stripe_account_id=account_id
            )
        owner.stripe_account_id = account_id

        logger.info(f"Connected account {account_id} created for owner {owner.id}")
        return {"account_id": account_id, "created": True}

    def create_onboarding_link(self, account_id: str, return_url: str, refresh_url: str) -> dict:
        if self.dev_mode:
            return {"url": return_url, "dev_mode": True}
        return {"url": self.gateway.create_account_link(account_id, return_url, refresh_url)}

    def get_account_status(self, account_id: str | None) -> dict:
        if not account_id:
            return {"connected": False, "needs_onboarding": True}

        if self.dev_mode:
            return {
                "connected": True,
                "account_id": account_id,
                "charges_enabled": False,
                "payouts_enabled": False,
                "details_submitted": False,
                "needs_onboarding": True,
                "dev_mode": True,
            }

        status = self.gateway.retrieve_account(account_id)
        return {
            "connected": True,
            "account_id": status.account_id,
            "charges_enabled": status.charges_enabled,
            "payouts_enabled": status.payouts_enabled,
            "details_submitted": status.details_submitted,
            "needs_onboarding": not status.details_submitted,
        }

    # Order payments

    def create_order_payment_intent(self, amount: int, restaurant_id, order_id, order_fee: int = 0) -> dict:
        """
        Charge ``amount`` (minor units) on behalf of the restaurant's connected account,
        keeping the platform fee. ``order_fee`` is the flat order fee when this share carries it;
        it is charged on top and kept by the platform in full. Fails with ``OnboardingRequired``
        when the restaurant cannot receive transfers yet.
        """
        if amount is None or int(amount) <= 0:
            raise InvalidInput("Amount must be a positive integer in minor units", {"field": "amount"})
        amount = int(amount)
        order_fee = int(order_fee or 0)

        restaurant = Restaurant.objects.filter(id=restaurant_id).first()
        if restaurant is None:
            raise ResourceNotFound("Restaurant", restaurant_id)

        fee = compute_platform_fee(amount)
        breakdown = {
            "amount": amount + order_fee,
            "platform_fee": fee + order_fee,
            "order_fee": order_fee,
            "restaurant_amount": amount - fee,
            "currency": settings.STRIPE_CURRENCY,
        }

        if self.dev_mode:
            logger.warning(f"Stripe not configured, returning demo payment intent for order {order_id}")
            return {"payment_intent_id": None, "client_secret": None, "dev_mode": True, **breakdown}

        if restaurant.needs_onboarding:
            raise OnboardingRequired(restaurant.id)

        intent = self.gateway.create_payment_intent(
            amount=breakdown["amount"],
            currency=settings.STRIPE_CURRENCY,
            application_fee_amount=breakdown["platform_fee"],
            destination=restaurant.stripe_account_id,
            metadata={
                "order_id": str(order_id),
                "restaurant_id": str(restaurant.id),
                "platform_fee": str(breakdown["platform_fee"]),
            },
        )
        RestaurantPayment.objects.filter(order_id=order_id, restaurant_id=restaurant.id).update(
            stripe_payment_intent_id=intent.id
        )

        logger.info(
            f"Payment intent {intent.id} for order {order_id}: amount={breakdown['amount']} "
            f"fee={breakdown['platform_fee']}"
        )
        return {"payment_intent_id": intent.id, "client_secret": intent.client_secret, **breakdown}

    # Owner subscriptions

    def create_subscription_session(self, owner: RestaurantOwner, success_url: str, cancel_url: str) -> dict:
        if self.dev_mode:
            logger.warning(f"Stripe not configured, sending owner {owner.id} to demo checkout")
            return {"session_id": None, "url": settings.STRIPE_DEMO_CHECKOUT_URL, "dev_mode": True}

        price_id = self._get_subscription_price_id()
        customer_id = self._ensure_customer(owner)

        session = self.gateway.create_subscription_checkout(
            customer_id=customer_id,
            price_id=price_id,
            success_url=success_url,
            cancel_url=cancel_url,
            metadata={"owner_id": str(owner.id)},
        )
        logger.info(f"Subscription checkout {session.id} created for owner {owner.id}")
        return {"session_id": session.id, "url": session.url}

    def confirm_subscription_session(self, session_id: str, owner: RestaurantOwner | None = None) -> dict:
        if not session_id:
            raise InvalidInput("session_id is required", {"field": "session_id"})

        if self.dev_mode:
            return {"subscribed": bool(owner and owner.is_subscribed), "dev_mode": True}

        session = self.gateway.retrieve_checkout_session(session_id)
        owner_id = session.metadata.get("owner_id")
        if owner is not None and owner_id != str(owner.id):
            raise Forbidden("This checkout session belongs to another owner")

        if session.payment_status != "paid":
            return {"subscribed": False, "status": session.status, "payment_status": session.payment_status}

        mark_owner_subscribed(owner_id, session.customer_id)
        if owner is not None:
            owner.is_subscribed = True
        return {"subscribed": True, "status": session.status, "payment_status": session.payment_status}

    def check_subscription_status(self, owner: RestaurantOwner) -> dict:
        """Reconcile the cached ``is_subscribed`` flag with the processor."""
        if self.dev_mode:
            return {"active": owner.is_subscribed, "dev_mode": True}

        customer_id = owner.stripe_customer_id
        if not customer_id:
            return {"active": False}

        if not customer_id.startswith("cus_"):
            logger.warning(f"Owner {owner.id} has malformed customer id {customer_id}, clearing it")
            self._reset_customer(owner)
            return {"active": False}

        try:
            subscription_ids = self.gateway.list_active_subscriptions(customer_id, limit=1)
        except GatewayResourceMissing:
            logger.warning(f"Customer {customer_id} no longer exists, clearing it for owner {owner.id}")
            self._reset_customer(owner)
            return {"active": False}

        active = bool(subscription_ids)
        if active != owner.is_subscribed:
            logger.info(f"Owner {owner.id} subscription flag drifted, setting is_subscribed={active}")
            RestaurantOwner.objects.filter(pk=owner.pk).update(is_subscribed=active)
            owner.is_subscribed = active

        return {"active": active, "subscription_id": subscription_ids[0] if active else None}

    def activate_demo_subscription(self, owner: RestaurantOwner) -> dict:
        if not (self.dev_mode or settings.DEBUG):
            raise InvalidState(
                "Demo subscriptions are only available in demo mode",
                current_state="live",
                expected_state="demo",
            )

        RestaurantOwner.objects.filter(pk=owner.pk).update(is_subscribed=True)
        owner.is_subscribed = True
        logger.info(f"Demo subscription activated for owner {owner.id}")
        return {"success": True, "message": "Demo subscription activated", "demo_mode": True}

    def _get_subscription_price_id(self) -> str:
        price_id = settings.STRIPE_SUBSCRIPTION_PRICE_ID or cache.get(SUBSCRIPTION_PRICE_CACHE_KEY)
        if not price_id:
            product_id = self.gateway.create_product(SUBSCRIPTION_PRODUCT_NAME, SUBSCRIPTION_PRODUCT_DESCRIPTION)
            price_id = self.gateway.create_price(
                product_id, SUBSCRIPTION_UNIT_AMOUNT, settings.STRIPE_CURRENCY, interval="month"
            )
            cache.set(SUBSCRIPTION_PRICE_CACHE_KEY, price_id, timeout=None)
            logger.info(f"Created default subscription price {price_id}")

        if not price_id.startswith("price_"):
            raise PaymentGatewayError("Invalid subscription price id", {"price_id": price_id})
        return price_id

    def _ensure_customer(self, owner: RestaurantOwner) -> str:
        if owner.stripe_customer_id and owner.stripe_customer_id.startswith("cus_"):
            return owner.stripe_customer_id

        customer_id = self.gateway.create_customer(
            email=owner.email,
            name=owner.name,
            metadata={"owner_id": str(owner.id)},
        )
        RestaurantOwner.objects.filter(pk=owner.pk).update(stripe_customer_id=customer_id)
        owner.stripe_customer_id = customer_id
        return customer_id

    @staticmethod
    def _reset_customer(owner: RestaurantOwner):
        RestaurantOwner.objects.filter(pk=owner.pk).update(stripe_customer_id=None, is_subscribed=False)
        owner.stripe_customer_id = None
        owner.is_subscribed = False


def get_payment_service() -> PaymentService:
    return PaymentService(get_payment_gateway())

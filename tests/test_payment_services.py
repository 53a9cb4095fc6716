import pytest

from apps.common.exceptions import (
    Forbidden,
    InvalidState,
    OnboardingRequired,
    PaymentGatewayError,
    ResourceNotFound,
)
from apps.orders.models import RestaurantPayment
from apps.payments.gateway import CheckoutSessionResult
from apps.payments.services import PaymentService, compute_platform_fee
from apps.restaurants.models import Restaurant, RestaurantOwner

pytestmark = pytest.mark.django_db


@pytest.fixture
def service(fake_gateway):
    return PaymentService(fake_gateway)


@pytest.mark.parametrize(
    ("amount", "fee"),
    [(10000, 500), (1999, 100), (1010, 51), (1009, 50), (1, 0), (10, 1)],
)
def test_platform_fee_is_five_percent_rounded_half_up(amount, fee):
    assert compute_platform_fee(amount) == fee


def test_platform_fee_follows_configured_percent(settings):
    settings.PLATFORM_FEE_PERCENT = 10

    assert compute_platform_fee(10000) == 1000


def test_payment_intent_splits_fee_and_transfer(service, fake_gateway, restaurant, jollof, place_order):
    order = place_order([(jollof, 1)])

    result = service.create_order_payment_intent(10000, restaurant.id, order.id)

    assert result["platform_fee"] == 500
    assert result["restaurant_amount"] == 9500
    assert result["client_secret"] == "pi_fake_1_secret"
    [call] = fake_gateway.called("create_payment_intent")
    assert call["amount"] == 10000
    assert call["application_fee_amount"] == 500
    assert call["destination"] == "acct_r1"
    assert call["metadata"] == {"order_id": str(order.id), "restaurant_id": str(restaurant.id), "platform_fee": "500"}

    assert RestaurantPayment.objects.get(order=order).stripe_payment_intent_id == "pi_fake_1"


def test_payment_intent_adds_order_fee_on_top(service, fake_gateway, restaurant, jollof, place_order):
    order = place_order([(jollof, 1)])

    result = service.create_order_payment_intent(1000, restaurant.id, order.id, order_fee=120)

    assert result["amount"] == 1120
    assert result["order_fee"] == 120
    assert result["platform_fee"] == 170
    assert result["restaurant_amount"] == 950
    [call] = fake_gateway.called("create_payment_intent")
    assert call["amount"] == 1120
    assert call["application_fee_amount"] == 170


def test_payment_intent_needs_onboarded_restaurant(service, fake_gateway, second_restaurant, suya, place_order):
    order = place_order([(suya, 1)])

    with pytest.raises(OnboardingRequired) as exc_info:
        service.create_order_payment_intent(500, second_restaurant.id, order.id)

    assert exc_info.value.code == "NEEDS_ONBOARDING"
    assert exc_info.value.details["restaurant_id"] == str(second_restaurant.id)
    assert fake_gateway.calls == []


def test_payment_intent_unknown_restaurant(service, jollof, place_order):
    order = place_order([(jollof, 1)])

    with pytest.raises(ResourceNotFound):
        service.create_order_payment_intent(1000, "0b5a3c1e-0000-4000-8000-000000000000", order.id)


def test_payment_intent_in_demo_mode(second_restaurant, suya, place_order):
    order = place_order([(suya, 1)])

    result = PaymentService(None).create_order_payment_intent(500, second_restaurant.id, order.id)

    assert result["dev_mode"] is True
    assert result["client_secret"] is None
    assert result["platform_fee"] == 25
    assert RestaurantPayment.objects.get(order=order).stripe_payment_intent_id is None


def test_connected_account_is_created_once(service, fake_gateway, owner, restaurant):
    restaurant.stripe_account_id = None
    restaurant.save()
    onboarded = Restaurant.objects.create(owner=owner, name="Mama Put Express", stripe_account_id="acct_existing")

    first = service.create_connected_account(owner)
    second = service.create_connected_account(owner)

    assert first["created"] is True
    assert second == {"account_id": first["account_id"], "created": False}
    assert len(fake_gateway.called("create_express_account")) == 1

    owner.refresh_from_db()
    restaurant.refresh_from_db()
    onboarded.refresh_from_db()
    assert owner.stripe_account_id == first["account_id"]
    assert restaurant.stripe_account_id == first["account_id"]
    assert onboarded.stripe_account_id == "acct_existing"


def test_connected_account_in_demo_mode(owner):
    result = PaymentService(None).create_connected_account(owner)

    assert result["dev_mode"] is True
    assert result["account_id"] is None


def test_account_status(service, fake_gateway):
    assert service.get_account_status(None) == {"connected": False, "needs_onboarding": True}

    status = service.get_account_status("acct_r1")

    assert status["connected"] is True
    assert status["needs_onboarding"] is True
    assert fake_gateway.called("retrieve_account") == [{"account_id": "acct_r1"}]


def test_subscription_session_creates_default_price_and_customer(service, fake_gateway, owner, settings):
    settings.STRIPE_SUBSCRIPTION_PRICE_ID = ""

    result = service.create_subscription_session(owner, "https://app.test/ok", "https://app.test/cancel")

    assert result == {"session_id": "cs_fake_1", "url": "https://checkout.stripe.test/cs_fake_1"}
    assert fake_gateway.called("create_price") == [
        {"product_id": "prod_fake_1", "unit_amount": 1999, "interval": "month"}
    ]
    [checkout] = fake_gateway.called("create_subscription_checkout")
    assert checkout == {
        "customer_id": "cus_fake_1",
        "price_id": "price_fake_1",
        "metadata": {"owner_id": str(owner.id)},
    }
    assert RestaurantOwner.objects.get(pk=owner.pk).stripe_customer_id == "cus_fake_1"


def test_default_price_is_created_once(service, fake_gateway, owner, settings):
    settings.STRIPE_SUBSCRIPTION_PRICE_ID = ""

    service.create_subscription_session(owner, "https://app.test/ok", "https://app.test/cancel")
    service.create_subscription_session(owner, "https://app.test/ok", "https://app.test/cancel")

    assert len(fake_gateway.called("create_product")) == 1
    assert len(fake_gateway.called("create_customer")) == 1


def test_subscription_session_uses_configured_price(service, fake_gateway, owner, settings):
    settings.STRIPE_SUBSCRIPTION_PRICE_ID = "price_live_123"
    owner.stripe_customer_id = "cus_known"
    owner.save()

    service.create_subscription_session(owner, "https://app.test/ok", "https://app.test/cancel")

    assert fake_gateway.called("create_product") == []
    assert fake_gateway.called("create_customer") == []
    [checkout] = fake_gateway.called("create_subscription_checkout")
    assert checkout["price_id"] == "price_live_123"
    assert checkout["customer_id"] == "cus_known"


def test_subscription_session_rejects_malformed_price(service, owner, settings):
    settings.STRIPE_SUBSCRIPTION_PRICE_ID = "plan_legacy"

    with pytest.raises(PaymentGatewayError):
        service.create_subscription_session(owner, "https://app.test/ok", "https://app.test/cancel")


def test_subscription_session_in_demo_mode(owner, settings):
    result = PaymentService(None).create_subscription_session(owner, "https://app.test/ok", "https://app.test/x")

    assert result["dev_mode"] is True
    assert result["url"] == settings.STRIPE_DEMO_CHECKOUT_URL


def test_stale_subscription_flag_is_cleared(service, fake_gateway, owner):
    owner.is_subscribed = True
    owner.stripe_customer_id = "cus_123"
    owner.save()

    result = service.check_subscription_status(owner)

    assert result["active"] is False
    assert RestaurantOwner.objects.get(pk=owner.pk).is_subscribed is False


def test_active_subscription_sets_flag(service, fake_gateway, owner):
    owner.stripe_customer_id = "cus_123"
    owner.save()
    fake_gateway.active_subscriptions["cus_123"] = ["sub_1"]

    result = service.check_subscription_status(owner)

    assert result == {"active": True, "subscription_id": "sub_1"}
    assert RestaurantOwner.objects.get(pk=owner.pk).is_subscribed is True


def test_missing_customer_is_forgotten(service, fake_gateway, owner):
    owner.is_subscribed = True
    owner.stripe_customer_id = "cus_gone"
    owner.save()
    fake_gateway.missing_customers.add("cus_gone")

    result = service.check_subscription_status(owner)

    assert result == {"active": False}
    owner.refresh_from_db()
    assert owner.stripe_customer_id is None
    assert owner.is_subscribed is False


def test_malformed_customer_id_is_cleared_without_gateway_call(service, fake_gateway, owner):
    owner.stripe_customer_id = "acct_wrong_kind"
    owner.save()

    assert service.check_subscription_status(owner) == {"active": False}
    assert fake_gateway.calls == []
    assert RestaurantOwner.objects.get(pk=owner.pk).stripe_customer_id is None


def test_owner_without_customer_is_not_subscribed(service, fake_gateway, owner):
    assert service.check_subscription_status(owner) == {"active": False}
    assert fake_gateway.calls == []


def test_confirm_paid_subscription_session(service, fake_gateway, owner):
    fake_gateway.sessions["cs_paid"] = CheckoutSessionResult(
        id="cs_paid",
        url=None,
        status="complete",
        payment_status="paid",
        customer_id="cus_new",
        metadata={"owner_id": str(owner.id)},
    )

    result = service.confirm_subscription_session("cs_paid", owner=owner)

    assert result["subscribed"] is True
    owner.refresh_from_db()
    assert owner.is_subscribed is True
    assert owner.stripe_customer_id == "cus_new"


def test_confirm_unpaid_subscription_session(service, fake_gateway, owner):
    fake_gateway.sessions["cs_open"] = CheckoutSessionResult(
        id="cs_open", url=None, status="open", payment_status="unpaid", metadata={"owner_id": str(owner.id)}
    )

    assert service.confirm_subscription_session("cs_open", owner=owner)["subscribed"] is False
    assert RestaurantOwner.objects.get(pk=owner.pk).is_subscribed is False


def test_confirm_session_of_another_owner(service, fake_gateway, owner, second_owner):
    fake_gateway.sessions["cs_paid"] = CheckoutSessionResult(
        id="cs_paid", url=None, status="complete", payment_status="paid", metadata={"owner_id": str(second_owner.id)}
    )

    with pytest.raises(Forbidden):
        service.confirm_subscription_session("cs_paid", owner=owner)


def test_demo_subscription_in_demo_mode(owner):
    result = PaymentService(None).activate_demo_subscription(owner)

    assert result == {"success": True, "message": "Demo subscription activated", "demo_mode": True}
    assert RestaurantOwner.objects.get(pk=owner.pk).is_subscribed is True


def test_demo_subscription_refused_in_live_mode(service, owner, settings):
    settings.DEBUG = False

    with pytest.raises(InvalidState):
        service.activate_demo_subscription(owner)

    assert RestaurantOwner.objects.get(pk=owner.pk).is_subscribed is False

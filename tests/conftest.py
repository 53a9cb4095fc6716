from decimal import Decimal

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from apps.common.constants import UserRole
from apps.common.exceptions import GatewayResourceMissing
from apps.orders import services as order_services
from apps.orders.models import Order
from apps.payments.gateway import AccountStatus, CheckoutSessionResult, PaymentGateway, PaymentIntentResult
from apps.restaurants.models import Dish, Restaurant, RestaurantOwner
from apps.users.models import User

PASSWORD = "Sup3r-secret-pass"


class FakeGateway(PaymentGateway):
    """In-memory processor recording every call it receives."""

    def __init__(self):
        self.calls = []
        self.active_subscriptions = {}
        self.missing_customers = set()
        self.sessions = {}
        self.accounts = {}

    def create_express_account(self, email, metadata):
        self.calls.append(("create_express_account", {"email": email, "metadata": metadata}))
        return f"acct_fake_{len(self.calls)}"

    def create_account_link(self, account_id, return_url, refresh_url):
        self.calls.append(("create_account_link", {"account_id": account_id}))
        return f"https://connect.stripe.test/setup/{account_id}"

    def retrieve_account(self, account_id):
        self.calls.append(("retrieve_account", {"account_id": account_id}))
        return self.accounts.get(
            account_id,
            AccountStatus(account_id, charges_enabled=False, payouts_enabled=False, details_submitted=False),
        )

    def create_payment_intent(self, amount, currency, application_fee_amount, destination, metadata):
        self.calls.append(
            (
                "create_payment_intent",
                {
                    "amount": amount,
                    "currency": currency,
                    "application_fee_amount": application_fee_amount,
                    "destination": destination,
                    "metadata": metadata,
                },
            )
        )
        intent_id = f"pi_fake_{len(self.called('create_payment_intent'))}"
        return PaymentIntentResult(
            id=intent_id,
            client_secret=f"{intent_id}_secret",
            amount=amount,
            status="requires_payment_method",
        )

    def create_product(self, name, description):
        self.calls.append(("create_product", {"name": name}))
        return "prod_fake_1"

    def create_price(self, product_id, unit_amount, currency, interval="month"):
        self.calls.append(
            ("create_price", {"product_id": product_id, "unit_amount": unit_amount, "interval": interval})
        )
        return "price_fake_1"

    def create_customer(self, email, name, metadata):
        self.calls.append(("create_customer", {"email": email, "metadata": metadata}))
        return "cus_fake_1"

    def create_subscription_checkout(self, customer_id, price_id, success_url, cancel_url, metadata):
        self.calls.append(
            ("create_subscription_checkout", {"customer_id": customer_id, "price_id": price_id, "metadata": metadata})
        )
        return CheckoutSessionResult(
            id="cs_fake_1",
            url="https://checkout.stripe.test/cs_fake_1",
            status="open",
            payment_status="unpaid",
            customer_id=customer_id,
            metadata=metadata,
        )

    def retrieve_checkout_session(self, session_id):
        self.calls.append(("retrieve_checkout_session", {"session_id": session_id}))
        if session_id not in self.sessions:
            raise GatewayResourceMissing(f"No such checkout session: {session_id}")
        return self.sessions[session_id]

    def list_active_subscriptions(self, customer_id, limit=1):
        self.calls.append(("list_active_subscriptions", {"customer_id": customer_id}))
        if customer_id in self.missing_customers:
            raise GatewayResourceMissing(f"No such customer: {customer_id}")
        return self.active_subscriptions.get(customer_id, [])[:limit]

    def called(self, name):
        return [kwargs for call, kwargs in self.calls if call == name]


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def customer(db):
    return User.objects.create_user(email="ada@example.com", password=PASSWORD, name="Ada Obi", phone="555-0100")


@pytest.fixture
def other_customer(db):
    return User.objects.create_user(email="tunde@example.com", password=PASSWORD, name="Tunde Bello")


def _make_owner(email, name):
    user = User.objects.create_user(email=email, password=PASSWORD, name=name, role=UserRole.OWNER)
    return RestaurantOwner.objects.create(user=user)


@pytest.fixture
def owner(db):
    return _make_owner("chioma@example.com", "Chioma Eze")


@pytest.fixture
def second_owner(db):
    return _make_owner("kwame@example.com", "Kwame Mensah")


@pytest.fixture
def restaurant(owner):
    return Restaurant.objects.create(
        owner=owner,
        name="Mama Put Kitchen",
        address="4 Allen Ave",
        phone_number="555-0200",
        cuisine="Nigerian",
        stripe_account_id="acct_r1",
    )


@pytest.fixture
def second_restaurant(second_owner):
    return Restaurant.objects.create(owner=second_owner, name="Suya Spot", cuisine="Ghanaian")


@pytest.fixture
def jollof(restaurant):
    return Dish.objects.create(restaurant=restaurant, name="Jollof Rice", price=Decimal("10.00"))


@pytest.fixture
def suya(second_restaurant):
    return Dish.objects.create(restaurant=second_restaurant, name="Beef Suya", price=Decimal("5.00"))


@pytest.fixture
def place_order(customer):
    """Create an order through the service from ``(dish, quantity)`` pairs."""

    def _place(lines, user=customer, status=None, guest_info=None, **kwargs):
        items = [
            {
                "dish_id": dish.id,
                "name": dish.name,
                "price": dish.price,
                "quantity": quantity,
                "restaurant_id": dish.restaurant_id,
            }
            for dish, quantity in lines
        ]
        total = sum((dish.price * quantity for dish, quantity in lines), Decimal("0.00"))
        order = order_services.create_order(
            user.id if user else None,
            items,
            total,
            "12 Marina Rd",
            "555-0100",
            guest_info=guest_info,
            **kwargs,
        )
        if status:
            Order.objects.filter(pk=order.pk).update(status=status)
            order.refresh_from_db()
        return order

    return _place


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def customer_client(customer):
    client = APIClient()
    client.force_authenticate(customer)
    return client


@pytest.fixture
def owner_client(owner, restaurant):
    client = APIClient()
    client.force_authenticate(owner.user)
    return client


@pytest.fixture
def second_owner_client(second_owner, second_restaurant):
    client = APIClient()
    client.force_authenticate(second_owner.user)
    return client

from types import SimpleNamespace
from unittest import mock

import pytest
import stripe

from apps.common.exceptions import GatewayResourceMissing, PaymentGatewayError
from apps.payments.gateway import StripeGateway, get_payment_gateway


@pytest.fixture
def gateway():
    return StripeGateway("sk_test_123")


def test_payment_intent_routes_transfer_to_connected_account(gateway):
    intent = SimpleNamespace(id="pi_1", client_secret="pi_1_secret", amount=10000, status="requires_payment_method")

    with mock.patch("apps.payments.gateway.stripe.PaymentIntent.create", return_value=intent) as create:
        result = gateway.create_payment_intent(10000, "usd", 500, "acct_r1", {"order_id": "o1"})

    assert result.id == "pi_1"
    assert result.client_secret == "pi_1_secret"
    kwargs = create.call_args.kwargs
    assert kwargs["application_fee_amount"] == 500
    assert kwargs["transfer_data"] == {"destination": "acct_r1"}
    assert kwargs["api_key"] == "sk_test_123"


def test_active_subscriptions_are_listed_per_customer(gateway):
    page = SimpleNamespace(data=[SimpleNamespace(id="sub_1")])

    with mock.patch("apps.payments.gateway.stripe.Subscription.list", return_value=page) as list_subscriptions:
        assert gateway.list_active_subscriptions("cus_1") == ["sub_1"]

    list_subscriptions.assert_called_once_with(customer="cus_1", status="active", limit=1, api_key="sk_test_123")


def test_resource_missing_is_translated(gateway):
    error = stripe.InvalidRequestError("No such customer: 'cus_gone'", "customer", code="resource_missing")

    with mock.patch("apps.payments.gateway.stripe.Subscription.list", side_effect=error):
        with pytest.raises(GatewayResourceMissing):
            gateway.list_active_subscriptions("cus_gone")


def test_other_stripe_errors_become_gateway_errors(gateway):
    error = stripe.APIConnectionError("Network is unreachable")

    with mock.patch("apps.payments.gateway.stripe.Customer.create", side_effect=error):
        with pytest.raises(PaymentGatewayError) as exc_info:
            gateway.create_customer("chioma@example.com", "Chioma", {})

    assert not isinstance(exc_info.value, GatewayResourceMissing)


def test_gateway_is_disabled_without_secret_key(settings):
    settings.STRIPE_SECRET_KEY = ""
    assert get_payment_gateway() is None

    settings.STRIPE_SECRET_KEY = "sk_test_123"
    gateway = get_payment_gateway()
    assert isinstance(gateway, StripeGateway)
    assert gateway.api_key == "sk_test_123"

import json
from unittest import mock

import pytest
import stripe

from apps.common.constants import OrderStatus, PaymentShareStatus
from apps.restaurants.models import RestaurantOwner
from apps.webhooks.models import WebhookEvent, WebhookStatus

pytestmark = pytest.mark.django_db

WEBHOOK_URL = "/webhooks/stripe/"


@pytest.fixture(autouse=True)
def webhook_secret(settings):
    settings.STRIPE_WEBHOOK_SECRET = "whsec_test"


@pytest.fixture
def construct_event():
    with mock.patch("apps.webhooks.services.stripe.Webhook.construct_event") as patched:
        yield patched


def make_event(event_type, obj, event_id="evt_1"):
    return {"id": event_id, "type": event_type, "data": {"object": obj}}


def deliver(client, event, signature="t=1,v1=abc"):
    headers = {"HTTP_STRIPE_SIGNATURE": signature} if signature else {}
    return client.post(WEBHOOK_URL, data=json.dumps(event), content_type="application/json", **headers)


def test_subscription_checkout_marks_owner_subscribed(api_client, construct_event, owner):
    event = make_event(
        "checkout.session.completed",
        {"id": "cs_1", "mode": "subscription", "customer": "cus_1", "metadata": {"owner_id": str(owner.id)}},
    )

    response = deliver(api_client, event)

    assert response.status_code == 200
    assert response.json() == {"received": True, "status": "completed"}
    owner.refresh_from_db()
    assert owner.is_subscribed is True
    assert owner.stripe_customer_id == "cus_1"
    construct_event.assert_called_once()
    assert construct_event.call_args.args[2] == "whsec_test"


def test_redelivered_event_is_applied_once(api_client, construct_event, owner):
    event = make_event(
        "checkout.session.completed",
        {"id": "cs_1", "mode": "subscription", "customer": "cus_1", "metadata": {"owner_id": str(owner.id)}},
    )

    with mock.patch("apps.webhooks.handlers.mark_owner_subscribed") as mark_subscribed:
        deliver(api_client, event)
        deliver(api_client, event)

    mark_subscribed.assert_called_once_with(str(owner.id), "cus_1")
    assert WebhookEvent.objects.filter(event_id="evt_1").count() == 1


def test_payment_checkout_sessions_are_ignored(api_client, construct_event, owner):
    event = make_event("checkout.session.completed", {"id": "cs_2", "mode": "payment", "metadata": {}})

    response = deliver(api_client, event)

    assert response.status_code == 200
    assert RestaurantOwner.objects.get(pk=owner.pk).is_subscribed is False


def test_payment_intent_succeeded_marks_order_paid(api_client, construct_event, restaurant, jollof, place_order):
    order = place_order([(jollof, 1)])
    event = make_event(
        "payment_intent.succeeded",
        {"id": "pi_9", "metadata": {"order_id": str(order.id), "restaurant_id": str(restaurant.id)}},
    )

    response = deliver(api_client, event)

    assert response.status_code == 200
    order.refresh_from_db()
    assert order.status == OrderStatus.PAID
    share = order.restaurant_payments.get()
    assert share.status == PaymentShareStatus.PAID
    assert share.stripe_payment_intent_id == "pi_9"


def test_first_restaurant_payment_leaves_order_pending(
    api_client, construct_event, restaurant, second_restaurant, jollof, suya, place_order
):
    order = place_order([(jollof, 1), (suya, 1)])
    event = make_event(
        "payment_intent.succeeded",
        {"id": "pi_9", "metadata": {"order_id": str(order.id), "restaurant_id": str(restaurant.id)}},
    )

    response = deliver(api_client, event)

    assert response.status_code == 200
    order.refresh_from_db()
    assert order.status == OrderStatus.PENDING
    assert order.restaurant_payments.get(restaurant=second_restaurant).status == PaymentShareStatus.PENDING


def test_payment_with_malformed_order_id_is_rejected(api_client, construct_event):
    event = make_event("payment_intent.succeeded", {"id": "pi_9", "metadata": {"order_id": "42"}})

    response = deliver(api_client, event)

    assert response.status_code == 400
    webhook_event = WebhookEvent.objects.get(event_id="evt_1")
    assert webhook_event.status == WebhookStatus.FAILED
    assert "malformed" in webhook_event.error_message


def test_payment_for_unknown_order_is_recorded_as_failed(api_client, construct_event):
    event = make_event(
        "payment_intent.succeeded",
        {"id": "pi_9", "metadata": {"order_id": "0b5a3c1e-0000-4000-8000-000000000000"}},
    )

    response = deliver(api_client, event)

    assert response.status_code == 400
    webhook_event = WebhookEvent.objects.get(event_id="evt_1")
    assert webhook_event.status == WebhookStatus.FAILED
    assert "not found" in webhook_event.error_message


def test_subscription_deleted_unsubscribes_owner(api_client, construct_event, owner):
    owner.stripe_customer_id = "cus_1"
    owner.is_subscribed = True
    owner.save()

    response = deliver(api_client, make_event("customer.subscription.deleted", {"id": "sub_1", "customer": "cus_1"}))

    assert response.status_code == 200
    assert RestaurantOwner.objects.get(pk=owner.pk).is_subscribed is False


def test_unknown_event_types_are_acknowledged(api_client, construct_event):
    response = deliver(api_client, make_event("invoice.created", {"id": "in_1"}))

    assert response.status_code == 200
    assert WebhookEvent.objects.get(event_id="evt_1").status == WebhookStatus.COMPLETED


def test_missing_signature_is_rejected(api_client, construct_event):
    response = deliver(api_client, make_event("invoice.created", {"id": "in_1"}), signature=None)

    assert response.status_code == 403
    construct_event.assert_not_called()
    assert not WebhookEvent.objects.exists()


def test_invalid_signature_is_rejected(api_client, construct_event):
    construct_event.side_effect = stripe.SignatureVerificationError("No signatures found", "t=1,v1=bad")

    response = deliver(api_client, make_event("invoice.created", {"id": "in_1"}), signature="t=1,v1=bad")

    assert response.status_code == 403
    assert not WebhookEvent.objects.exists()


def test_unconfigured_secret_rejects_everything(api_client, construct_event, settings):
    settings.STRIPE_WEBHOOK_SECRET = ""

    response = deliver(api_client, make_event("invoice.created", {"id": "in_1"}))

    assert response.status_code == 403
    construct_event.assert_not_called()

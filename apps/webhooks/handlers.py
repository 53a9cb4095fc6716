import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from apps.common.exceptions import ResourceNotFound
from apps.orders.services import mark_order_paid
from apps.payments.services import mark_customer_unsubscribed, mark_owner_subscribed
from apps.webhooks.models import WebhookEvent, WebhookSource, WebhookStatus
from apps.webhooks.services import StripeWebhookError

logger = logging.getLogger(__name__)


class StripeWebhookHandler:
    """
    Applies a verified Stripe event at most once.
    The ``WebhookEvent`` row keyed by the event id records progress and failures.
    """

    def __init__(self, request):
        self.request = request
        self.event = getattr(request, "stripe_event", None)

        if not self.event:
            raise ValueError("Request does not contain a verified Stripe event")

        self.routes = {
            "checkout.session.completed": self._handle_checkout_session_completed,
            "payment_intent.succeeded": self._handle_payment_intent_succeeded,
            "customer.subscription.deleted": self._handle_subscription_deleted,
        }

    def handle_event(self) -> WebhookEvent:
        event_id = self.event["id"]
        event_type = self.event["type"]

        logger.info(f"Handling Stripe webhook event: {event_type} ({event_id})")

        webhook_event = self._get_or_create_webhook_event(event_id, event_type)

        if webhook_event.status == WebhookStatus.COMPLETED:
            logger.info(f"Event {event_id} already processed, skipping")
            return webhook_event

        webhook_event.status = WebhookStatus.PROCESSING
        webhook_event.save(update_fields=["status", "updated_at"])

        try:
            handler = self.routes.get(event_type)
            if handler is None:
                logger.warning(f"Unhandled event type: {event_type}")
            else:
                handler(self.event["data"]["object"])

            webhook_event.status = WebhookStatus.COMPLETED
            webhook_event.processed_at = timezone.now()
            webhook_event.error_message = None
            webhook_event.save(update_fields=["status", "processed_at", "error_message", "updated_at"])

            logger.info(f"Successfully processed webhook event {event_id}")

        except Exception as e:
            webhook_event.status = WebhookStatus.FAILED
            webhook_event.error_message = str(e)
            webhook_event.save(update_fields=["status", "error_message", "updated_at"])
            logger.error(f"Failed to process webhook event {event_id}: {e}", exc_info=True)
            raise

        return webhook_event

    def _get_or_create_webhook_event(self, event_id: str, event_type: str) -> WebhookEvent:
        webhook_event, created = WebhookEvent.objects.get_or_create(
            event_id=event_id,
            defaults={
                "event_type": event_type,
                "source": WebhookSource.STRIPE,
                "payload": self.event,
                "status": WebhookStatus.PENDING,
            },
        )

        if not created:
            logger.info(f"Webhook event {event_id} already exists with status {webhook_event.status}")

        return webhook_event

    @transaction.atomic
    def _handle_checkout_session_completed(self, session):
        """Subscription checkouts mark the owner subscribed and remember the billing customer."""
        if session.get("mode") != "subscription":
            logger.info(f"Ignoring checkout session {session['id']} in mode {session.get('mode')}")
            return

        owner_id = (session.get("metadata") or {}).get("owner_id")
        if not owner_id:
            raise StripeWebhookError(f"Checkout session {session['id']} has no owner_id metadata")

        mark_owner_subscribed(owner_id, session.get("customer"))

    @transaction.atomic
    def _handle_payment_intent_succeeded(self, intent):
        metadata = intent.get("metadata") or {}
        order_id = metadata.get("order_id")
        if not order_id:
            logger.info(f"Payment intent {intent['id']} is not tied to an order")
            return

        try:
            mark_order_paid(intent["id"], order_id, restaurant_id=metadata.get("restaurant_id"))
        except ResourceNotFound as e:
            raise StripeWebhookError(f"Order {order_id} for payment intent {intent['id']} not found") from e
        except DjangoValidationError as e:
            raise StripeWebhookError(f"Payment intent {intent['id']} carries malformed metadata: {metadata}") from e

    @transaction.atomic
    def _handle_subscription_deleted(self, subscription):
        customer_id = subscription.get("customer")
        if not customer_id:
            raise StripeWebhookError(f"Subscription {subscription['id']} has no customer")

        mark_customer_unsubscribed(customer_id)

import json
import logging

import stripe
from django.conf import settings

logger = logging.getLogger(__name__)


class StripeWebhookError(Exception):
    pass


def verify_webhook_signature(payload: bytes, sig_header: str) -> dict:
    """
    Check the ``Stripe-Signature`` header against the endpoint secret.

    Returns the event as plain JSON data so it can be stored and handled without SDK objects.
    """
    if not settings.STRIPE_WEBHOOK_SECRET:
        raise StripeWebhookError("Webhook secret is not configured")

    try:
        stripe.Webhook.construct_event(payload, sig_header, settings.STRIPE_WEBHOOK_SECRET)
        return json.loads(payload)
    except ValueError as e:
        logger.error(f"Invalid webhook payload: {e}")
        raise StripeWebhookError("Invalid payload") from e
    except stripe.SignatureVerificationError as e:
        logger.error(f"Invalid webhook signature: {e}")
        raise StripeWebhookError("Invalid signature") from e

import logging

from rest_framework import permissions

from apps.webhooks.services import StripeWebhookError, verify_webhook_signature

logger = logging.getLogger(__name__)


class HasValidStripeSignature(permissions.BasePermission):
    """Stands in for authentication on the webhook endpoint; the verified event is kept on the request."""

    message = "Invalid Stripe signature"

    def has_permission(self, request, view):
        sig_header = request.META.get("HTTP_STRIPE_SIGNATURE")
        if not sig_header:
            logger.warning("Webhook call without Stripe-Signature header")
            return False

        try:
            request.stripe_event = verify_webhook_signature(request.body, sig_header)
        except StripeWebhookError as e:
            logger.warning(f"Stripe signature verification failed: {e}")
            return False
        return True

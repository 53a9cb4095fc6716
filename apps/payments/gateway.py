"""
Payment processor boundary.

``PaymentGateway`` is what ``PaymentService`` talks to; ``StripeGateway`` is the real
implementation. Every Stripe call passes its own ``api_key`` so no global SDK state
is shared between gateways.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field

import stripe
from django.conf import settings

from apps.common.exceptions import GatewayResourceMissing, PaymentGatewayError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountStatus:
    account_id: str
    charges_enabled: bool
    payouts_enabled: bool
    details_submitted: bool


@dataclass(frozen=True)
class PaymentIntentResult:
    id: str
    client_secret: str | None
    amount: int
    status: str


@dataclass(frozen=True)
class CheckoutSessionResult:
    id: str
    url: str | None
    status: str | None = None
    payment_status: str | None = None
    customer_id: str | None = None
    metadata: dict = field(default_factory=dict)


class PaymentGateway(ABC):
    @abstractmethod
    def create_express_account(self, email: str, metadata: dict) -> str:
        """Create a connected account and return its id."""

    @abstractmethod
    def create_account_link(self, account_id: str, return_url: str, refresh_url: str) -> str:
        """Return a hosted onboarding URL for the account."""

    @abstractmethod
    def retrieve_account(self, account_id: str) -> AccountStatus:
        pass

    @abstractmethod
    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        application_fee_amount: int,
        destination: str,
        metadata: dict,
    ) -> PaymentIntentResult:
        pass

    @abstractmethod
    def create_product(self, name: str, description: str) -> str:
        pass

    @abstractmethod
    def create_price(self, product_id: str, unit_amount: int, currency: str, interval: str = "month") -> str:
        pass

    @abstractmethod
    def create_customer(self, email: str, name: str, metadata: dict) -> str:
        pass

    @abstractmethod
    def create_subscription_checkout(
        self,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: dict,
    ) -> CheckoutSessionResult:
        pass

    @abstractmethod
    def retrieve_checkout_session(self, session_id: str) -> CheckoutSessionResult:
        pass

    @abstractmethod
    def list_active_subscriptions(self, customer_id: str, limit: int = 1) -> list[str]:
        """Ids of the customer's active subscriptions."""


class StripeGateway(PaymentGateway):
    def __init__(self, api_key: str):
        self.api_key = api_key

    @contextmanager
    def _call(self, operation: str):
        """Translate SDK errors so no Stripe object leaves the adapter."""
        try:
            yield
        except stripe.InvalidRequestError as err:
            logger.error(f"Stripe {operation} rejected: {err.user_message or err}")
            if err.code == "resource_missing":
                raise GatewayResourceMissing(f"Stripe {operation}: resource missing", {"param": err.param}) from err
            raise PaymentGatewayError(f"Stripe {operation} failed", {"code": err.code}) from err
        except stripe.StripeError as err:
            logger.error(f"Stripe {operation} failed: {err}")
            raise PaymentGatewayError(f"Stripe {operation} failed", {"code": getattr(err, "code", None)}) from err

    def create_express_account(self, email, metadata):
        with self._call("account creation"):
            account = stripe.Account.create(
                type="express",
                email=email,
                capabilities={"card_payments": {"requested": True}, "transfers": {"requested": True}},
                metadata=metadata,
                api_key=self.api_key,
            )
        return account.id

    def create_account_link(self, account_id, return_url, refresh_url):
        with self._call("account link"):
            link = stripe.AccountLink.create(
                account=account_id,
                return_url=return_url,
                refresh_url=refresh_url,
                type="account_onboarding",
                api_key=self.api_key,
            )
        return link.url

    def retrieve_account(self, account_id):
        with self._call("account retrieval"):
            account = stripe.Account.retrieve(account_id, api_key=self.api_key)
        return AccountStatus(
            account_id=account.id,
            charges_enabled=bool(account.charges_enabled),
            payouts_enabled=bool(account.payouts_enabled),
            details_submitted=bool(account.details_submitted),
        )

    def create_payment_intent(self, amount, currency, application_fee_amount, destination, metadata):
        with self._call("payment intent"):
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=currency,
                application_fee_amount=application_fee_amount,
                transfer_data={"destination": destination},
                automatic_payment_methods={"enabled": True},
                metadata=metadata,
                api_key=self.api_key,
            )
        return PaymentIntentResult(
            id=intent.id,
            client_secret=intent.client_secret,
            amount=intent.amount,
            status=intent.status,
        )

    def create_product(self, name, description):
        with self._call("product creation"):
            product = stripe.Product.create(name=name, description=description, api_key=self.api_key)
        return product.id

    def create_price(self, product_id, unit_amount, currency, interval="month"):
        with self._call("price creation"):
            price = stripe.Price.create(
                product=product_id,
                unit_amount=unit_amount,
                currency=currency,
                recurring={"interval": interval},
                api_key=self.api_key,
            )
        return price.id

    def create_customer(self, email, name, metadata):
        with self._call("customer creation"):
            customer = stripe.Customer.create(email=email, name=name, metadata=metadata, api_key=self.api_key)
        return customer.id

    def create_subscription_checkout(self, customer_id, price_id, success_url, cancel_url, metadata):
        with self._call("checkout session"):
            session = stripe.checkout.Session.create(
                customer=customer_id,
                mode="subscription",
                line_items=[{"price": price_id, "quantity": 1}],
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
                api_key=self.api_key,
            )
        return self._session_result(session)

    def retrieve_checkout_session(self, session_id):
        with self._call("checkout session retrieval"):
            session = stripe.checkout.Session.retrieve(session_id, api_key=self.api_key)
        return self._session_result(session)

    def list_active_subscriptions(self, customer_id, limit=1):
        with self._call("subscription listing"):
            subscriptions = stripe.Subscription.list(
                customer=customer_id,
                status="active",
                limit=limit,
                api_key=self.api_key,
            )
        return [subscription.id for subscription in subscriptions.data]

    @staticmethod
    def _session_result(session) -> CheckoutSessionResult:
        return CheckoutSessionResult(
            id=session.id,
            url=session.url,
            status=session.status,
            payment_status=session.payment_status,
            customer_id=session.customer,
            metadata=dict(session.metadata or {}),
        )


def get_payment_gateway() -> PaymentGateway | None:
    """The configured gateway, or ``None`` when no secret key is set (demo mode)."""
    if not settings.STRIPE_SECRET_KEY:
        return None
    return StripeGateway(settings.STRIPE_SECRET_KEY)

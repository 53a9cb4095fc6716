from django.conf import settings
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.response import Response

from apps.common.constants import OrderStatus, PaymentShareStatus
from apps.common.exceptions import InvalidState
from apps.common.mixins import CustomerMixin, OwnerMixin
from apps.orders import services as order_services
from apps.payments.serializers import (
    AccountStatusSerializer,
    CheckoutSessionSerializer,
    ConnectAccountSerializer,
    DemoSubscriptionSerializer,
    PaymentIntentCreateSerializer,
    PaymentIntentSerializer,
    SubscriptionConfirmationSerializer,
    SubscriptionStatusSerializer,
)
from apps.payments.services import get_payment_service


def _to_minor_units(amount) -> int:
    return int((amount * 100).to_integral_value())


class OrderPaymentIntentView(CustomerMixin, GenericAPIView):
    serializer_class = PaymentIntentCreateSerializer

    @extend_schema(
        summary="Customer: Create a payment intent for one restaurant's share of an order",
        description="The amount is the restaurant's item subtotal, plus the flat order fee when this share "
        "carries it. The platform keeps its fees, the rest is transferred to the restaurant's connected account. "
        "The order turns paid once every restaurant's share has been paid.",
        request=PaymentIntentCreateSerializer,
        responses={201: PaymentIntentSerializer},
        tags=["payments"],
    )
    def post(self, request, order_id):
        serializer = PaymentIntentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        restaurant_id = serializer.validated_data["restaurant_id"]

        order = order_services.get_order_by_id(order_id, user_id=request.user.id)
        if order.status != OrderStatus.PENDING:
            raise InvalidState(
                f"Order with status {order.status} cannot be paid",
                current_state=order.status,
                expected_state=OrderStatus.PENDING,
            )

        share = order_services.get_restaurant_payment(order.id, restaurant_id)
        if share.is_paid:
            raise InvalidState(
                "This restaurant's share of the order is already paid",
                current_state=share.status,
                expected_state=PaymentShareStatus.PENDING,
            )

        subtotal = order_services.get_order_restaurant_subtotal(order.id, restaurant_id)
        result = get_payment_service().create_order_payment_intent(
            _to_minor_units(subtotal), restaurant_id, order.id, order_fee=_to_minor_units(share.order_fee)
        )
        return Response(PaymentIntentSerializer(result).data, status=status.HTTP_201_CREATED)


class SubscriptionCheckoutView(OwnerMixin, GenericAPIView):
    serializer_class = CheckoutSessionSerializer

    @extend_schema(
        summary="Owner: Start the monthly subscription checkout",
        request=None,
        responses={201: CheckoutSessionSerializer},
        tags=["subscriptions"],
    )
    def post(self, request):
        result = get_payment_service().create_subscription_session(
            self.get_owner(),
            success_url=settings.STRIPE_SUBSCRIPTION_SUCCESS_URL,
            cancel_url=settings.STRIPE_SUBSCRIPTION_CANCEL_URL,
        )
        return Response(CheckoutSessionSerializer(result).data, status=status.HTTP_201_CREATED)


@extend_schema(
    summary="Owner: Subscription status",
    description="Checks the processor and corrects the cached flag when it has drifted.",
    responses={200: SubscriptionStatusSerializer},
    tags=["subscriptions"],
)
class SubscriptionStatusView(OwnerMixin, GenericAPIView):
    serializer_class = SubscriptionStatusSerializer

    def get(self, request):
        result = get_payment_service().check_subscription_status(self.get_owner())
        return Response(SubscriptionStatusSerializer(result).data)


@extend_schema(
    summary="Owner: Confirm a completed subscription checkout",
    parameters=[
        OpenApiParameter(name="session_id", type=str, location=OpenApiParameter.QUERY, required=True),
    ],
    responses={200: SubscriptionConfirmationSerializer},
    tags=["subscriptions"],
)
class SubscriptionSuccessView(OwnerMixin, GenericAPIView):
    serializer_class = SubscriptionConfirmationSerializer

    def get(self, request):
        result = get_payment_service().confirm_subscription_session(
            request.query_params.get("session_id"), owner=self.get_owner()
        )
        return Response(SubscriptionConfirmationSerializer(result).data)


class DemoSubscriptionView(OwnerMixin, GenericAPIView):
    serializer_class = DemoSubscriptionSerializer

    @extend_schema(
        summary="Owner: Activate a demo subscription",
        description="Only available while payments run in demo mode or DEBUG is on.",
        request=None,
        responses={200: DemoSubscriptionSerializer},
        tags=["subscriptions"],
    )
    def post(self, request):
        result = get_payment_service().activate_demo_subscription(self.get_owner())
        return Response(DemoSubscriptionSerializer(result).data)


class ConnectAccountView(OwnerMixin, GenericAPIView):
    serializer_class = ConnectAccountSerializer

    @extend_schema(
        summary="Owner: Create a connected account and get the onboarding link",
        request=None,
        responses={200: ConnectAccountSerializer},
        tags=["connect"],
    )
    def post(self, request):
        service = get_payment_service()
        account = service.create_connected_account(self.get_owner())

        onboarding_url = None
        if account["account_id"]:
            link = service.create_onboarding_link(
                account["account_id"],
                return_url=settings.STRIPE_CONNECT_RETURN_URL,
                refresh_url=settings.STRIPE_CONNECT_REFRESH_URL,
            )
            onboarding_url = link["url"]

        return Response(ConnectAccountSerializer({**account, "onboarding_url": onboarding_url}).data)


@extend_schema(summary="Owner: Connected account status", responses={200: AccountStatusSerializer}, tags=["connect"])
class ConnectStatusView(OwnerMixin, GenericAPIView):
    serializer_class = AccountStatusSerializer

    def get(self, request):
        result = get_payment_service().get_account_status(self.get_owner().stripe_account_id)
        return Response(AccountStatusSerializer(result).data)

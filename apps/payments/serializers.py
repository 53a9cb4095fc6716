from rest_framework import serializers


class PaymentIntentCreateSerializer(serializers.Serializer):
    restaurant_id = serializers.UUIDField()


class PaymentIntentSerializer(serializers.Serializer):
    payment_intent_id = serializers.CharField(allow_null=True)
    client_secret = serializers.CharField(allow_null=True)
    amount = serializers.IntegerField(help_text="Minor units")
    platform_fee = serializers.IntegerField(help_text="Percentage fee plus the order fee, kept by the platform")
    order_fee = serializers.IntegerField(help_text="Flat order fee carried by this share")
    restaurant_amount = serializers.IntegerField()
    currency = serializers.CharField()
    dev_mode = serializers.BooleanField(required=False)


class CheckoutSessionSerializer(serializers.Serializer):
    session_id = serializers.CharField(allow_null=True)
    url = serializers.URLField(allow_null=True)
    dev_mode = serializers.BooleanField(required=False)


class SubscriptionStatusSerializer(serializers.Serializer):
    active = serializers.BooleanField()
    subscription_id = serializers.CharField(required=False, allow_null=True)
    dev_mode = serializers.BooleanField(required=False)


class SubscriptionConfirmationSerializer(serializers.Serializer):
    subscribed = serializers.BooleanField()
    status = serializers.CharField(required=False, allow_null=True)
    payment_status = serializers.CharField(required=False, allow_null=True)
    dev_mode = serializers.BooleanField(required=False)


class DemoSubscriptionSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    demo_mode = serializers.BooleanField()


class ConnectAccountSerializer(serializers.Serializer):
    account_id = serializers.CharField(allow_null=True)
    created = serializers.BooleanField()
    onboarding_url = serializers.URLField(allow_null=True)
    dev_mode = serializers.BooleanField(required=False)


class AccountStatusSerializer(serializers.Serializer):
    connected = serializers.BooleanField()
    account_id = serializers.CharField(required=False)
    charges_enabled = serializers.BooleanField(required=False)
    payouts_enabled = serializers.BooleanField(required=False)
    details_submitted = serializers.BooleanField(required=False)
    needs_onboarding = serializers.BooleanField()
    dev_mode = serializers.BooleanField(required=False)

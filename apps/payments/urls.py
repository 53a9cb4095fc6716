from django.urls import path

from apps.payments import views

app_name = "payments"

urlpatterns = [
    path(
        "orders/<uuid:order_id>/payment-intent/",
        views.OrderPaymentIntentView.as_view(),
        name="order-payment-intent",
    ),
    path("subscriptions/checkout/", views.SubscriptionCheckoutView.as_view(), name="subscription-checkout"),
    path("subscriptions/status/", views.SubscriptionStatusView.as_view(), name="subscription-status"),
    path("subscriptions/success/", views.SubscriptionSuccessView.as_view(), name="subscription-success"),
    path("subscriptions/activate-demo/", views.DemoSubscriptionView.as_view(), name="subscription-demo"),
    path("connect/account/", views.ConnectAccountView.as_view(), name="connect-account"),
    path("connect/status/", views.ConnectStatusView.as_view(), name="connect-status"),
]

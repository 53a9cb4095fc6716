from django.urls import path

from apps.orders import views

app_name = "orders"

urlpatterns = [
    path("", views.OrderListCreateView.as_view(), name="order-list"),  # GET list, POST create
    path("guest/", views.GuestOrderCreateView.as_view(), name="order-guest"),
    path("stats/", views.OrderStatsView.as_view(), name="order-stats"),
    path("restaurant/", views.RestaurantOrderListView.as_view(), name="restaurant-orders"),
    path("restaurant/stats/", views.RestaurantOrderStatsView.as_view(), name="restaurant-order-stats"),
    path("<uuid:order_id>/", views.OrderDetailView.as_view(), name="order-detail"),
    path("<uuid:order_id>/cancel/", views.OrderCancelView.as_view(), name="order-cancel"),
    path("<uuid:order_id>/status/", views.OrderStatusUpdateView.as_view(), name="order-status"),
]

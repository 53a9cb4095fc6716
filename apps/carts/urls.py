from django.urls import path

from . import views

app_name = "carts"

urlpatterns = [
    path("", views.CartView.as_view(), name="cart"),  # GET, POST, DELETE
    path("<uuid:dish_id>/", views.CartItemView.as_view(), name="cart-item"),  # DELETE
]

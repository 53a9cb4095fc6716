from django.urls import path

from . import views

app_name = "restaurants"

urlpatterns = [
    path("restaurants/", views.RestaurantListView.as_view(), name="restaurant-list"),
    path("restaurants/<uuid:restaurant_id>/", views.RestaurantDetailView.as_view(), name="restaurant-detail"),
    path("owners/register/", views.OwnerRegisterView.as_view(), name="owner-register"),
    path("owners/restaurant/", views.OwnerRestaurantView.as_view(), name="owner-restaurant"),
    path("owners/dishes/", views.OwnerDishListCreateView.as_view(), name="owner-dish-list"),
    path("owners/dishes/<uuid:dish_id>/", views.OwnerDishDetailView.as_view(), name="owner-dish-detail"),
    path(
        "owners/dishes/<uuid:dish_id>/availability/",
        views.OwnerDishAvailabilityView.as_view(),
        name="owner-dish-availability",
    ),
]

import uuid

from django.http import Http404
from django.shortcuts import get_object_or_404

from .drf_permissions import IsCustomer, IsCustomerOrOwner, IsRestaurantOwner


class CustomerMixin:
    permission_classes = [IsCustomer]


class CustomerOrOwnerMixin:
    permission_classes = [IsCustomerOrOwner]


class OwnerMixin:
    """
    Views acting on behalf of a restaurant owner.
    ``?restaurant=<uuid>`` selects one of the owner's restaurants; otherwise the oldest is used.
    """

    permission_classes = [IsRestaurantOwner]

    def get_owner(self):
        return self.request.user.restaurant_owner

    def get_restaurant(self):
        restaurants = self.get_owner().restaurants.listed().order_by("created_at")
        restaurant_id = self.request.query_params.get("restaurant")
        if restaurant_id:
            try:
                restaurant_id = uuid.UUID(restaurant_id)
            except ValueError:
                raise Http404("Restaurant not found for this owner")
            return get_object_or_404(restaurants, id=restaurant_id)

        restaurant = restaurants.first()
        if restaurant is None:
            raise Http404("Restaurant not found for this owner")
        return restaurant

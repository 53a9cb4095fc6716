from rest_framework import permissions

from .utils import is_admin, is_authenticated, is_customer, is_restaurant_owner


class IsCustomer(permissions.BasePermission):
    message = "You must be logged in as a customer."

    def has_permission(self, request, view) -> bool:
        return is_customer(request.user) or is_admin(request.user)


class IsRestaurantOwner(permissions.BasePermission):
    message = "You must be logged in as a restaurant owner."

    def has_permission(self, request, view) -> bool:
        return is_restaurant_owner(request.user)


class IsCustomerOrOwner(permissions.BasePermission):
    message = "Authentication required."

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not is_authenticated(user):
            return False
        return is_customer(user) or is_restaurant_owner(user) or is_admin(user)

"""
Shared role checks used by permission classes and views.
"""

from apps.common.constants import UserRole


def is_authenticated(user) -> bool:
    return getattr(user, "is_authenticated", False)


def is_admin(user) -> bool:
    if getattr(user, "is_superuser", False) or getattr(user, "is_staff", False):
        return True
    return getattr(user, "role", None) == UserRole.ADMIN


def is_customer(user) -> bool:
    return is_authenticated(user) and getattr(user, "role", None) == UserRole.CUSTOMER


def is_restaurant_owner(user) -> bool:
    if not is_authenticated(user) or getattr(user, "role", None) != UserRole.OWNER:
        return False
    return hasattr(user, "restaurant_owner")

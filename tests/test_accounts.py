import pytest
from rest_framework_simplejwt.tokens import AccessToken

from apps.common.constants import UserRole
from apps.restaurants.models import Dish, Restaurant, RestaurantOwner
from apps.users.models import User

pytestmark = pytest.mark.django_db

PASSWORD = "Sup3r-secret-pass"


def test_customer_registration_returns_tokens(api_client):
    response = api_client.post(
        "/auth/register/",
        {"email": "bola@example.com", "name": "Bola", "password": PASSWORD, "password2": PASSWORD},
        format="json",
    )

    assert response.status_code == 201
    token = AccessToken(response.json()["access"])
    assert token["role"] == UserRole.CUSTOMER
    assert token["is_owner"] is False
    assert User.objects.get(email="bola@example.com").role == UserRole.CUSTOMER


def test_registration_rejects_mismatched_passwords(api_client):
    response = api_client.post(
        "/auth/register/",
        {"email": "bola@example.com", "password": PASSWORD, "password2": PASSWORD + "x"},
        format="json",
    )

    assert response.status_code == 400


def test_login_token_carries_role(api_client, owner):
    response = api_client.post("/auth/login/", {"email": owner.email, "password": PASSWORD}, format="json")

    assert response.status_code == 200
    token = AccessToken(response.json()["access"])
    assert token["role"] == UserRole.OWNER
    assert token["is_owner"] is True


def test_owner_registration_creates_owner_and_restaurant(api_client):
    response = api_client.post(
        "/owners/register/",
        {
            "email": "efua@example.com",
            "password": PASSWORD,
            "name": "Efua Asante",
            "restaurant_name": "Waakye Corner",
            "cuisine": "Ghanaian",
        },
        format="json",
    )

    assert response.status_code == 201
    body = response.json()
    assert body["restaurant"]["name"] == "Waakye Corner"
    assert "access" in body
    owner = RestaurantOwner.objects.get(user__email="efua@example.com")
    assert owner.user.role == UserRole.OWNER
    assert owner.is_subscribed is False
    assert Restaurant.objects.get(owner=owner).needs_onboarding is True


def test_owner_registration_rejects_taken_email(api_client, customer):
    response = api_client.post(
        "/owners/register/",
        {"email": customer.email, "password": PASSWORD, "name": "Dup", "restaurant_name": "Dup Diner"},
        format="json",
    )

    assert response.status_code == 400
    assert not RestaurantOwner.objects.exists()


def test_me_returns_and_updates_profile(customer_client):
    assert customer_client.get("/users/me").json()["email"] == "ada@example.com"

    response = customer_client.patch("/users/me", {"phone": "555-0199", "role": "admin"}, format="json")

    assert response.status_code == 200
    assert response.json()["phone"] == "555-0199"
    assert response.json()["role"] == UserRole.CUSTOMER


def test_restaurant_browsing(api_client, restaurant, second_restaurant, jollof):
    Dish.objects.create(restaurant=restaurant, name="Egusi Soup", price="12.50", is_available=False)

    listing = api_client.get("/restaurants/", {"cuisine": "Nigerian"})
    assert [r["name"] for r in listing.json()["results"]] == ["Mama Put Kitchen"]

    searched = api_client.get("/restaurants/", {"search": "suya"})
    assert [r["name"] for r in searched.json()["results"]] == ["Suya Spot"]

    detail = api_client.get(f"/restaurants/{restaurant.id}/")
    assert detail.status_code == 200
    assert [d["name"] for d in detail.json()["dishes"]] == ["Jollof Rice"]


def test_delisted_restaurant_leaves_the_catalogue(api_client, restaurant, jollof):
    restaurant.delist()

    assert restaurant.deleted_at is not None
    assert api_client.get("/restaurants/").json()["results"] == []
    assert api_client.get(f"/restaurants/{restaurant.id}/").status_code == 404

    restaurant.relist()

    assert Restaurant.objects.listed().get().deleted_at is None
    assert api_client.get(f"/restaurants/{restaurant.id}/").status_code == 200


def test_delisted_dish_is_hidden_from_menu(api_client, restaurant, jollof):
    jollof.delist()

    detail = api_client.get(f"/restaurants/{restaurant.id}/")

    assert detail.json()["dishes"] == []
    assert Dish.objects.filter(id=jollof.id).exists()

import pytest

from cart.services import add_to_cart
from chat.models import Message
from order.services import create_order

pytestmark = pytest.mark.django_db


def test_users_list_with_counts(admin_client, user, make_product):
    add_to_cart(user, make_product(), 1)
    create_order(user)
    Message.objects.create(user=user, content="one")
    Message.objects.create(user=user, content="two")

    res = admin_client.get("/admin/users")

    assert res.status_code == 200
    row = next(u for u in res.data if u["id"] == user.id)
    assert row["order_count"] == 1
    assert row["message_count"] == 2
    assert row["is_admin"] is False
    assert "password" not in row


def test_users_search(admin_client, make_user):
    make_user(email="carol@example.com", name="Carol")
    make_user(email="dave@example.com", name="Dave")

    res = admin_client.get("/admin/users", {"search": "carol"})

    assert [u["email"] for u in res.data] == ["carol@example.com"]


def test_unknown_ordering_falls_back(admin_client, make_user):
    make_user(email="x@example.com")
    res = admin_client.get("/admin/users", {"ordering": "password"})
    assert res.status_code == 200


def test_users_forbidden_for_customers(api_client, auth_client):
    assert api_client.get("/admin/users").status_code == 401
    assert auth_client.get("/admin/users").status_code == 403


def test_admin_flag_is_read_per_request(auth_client, user):
    assert auth_client.get("/admin/users").status_code == 403
    user.is_staff = True
    user.save()
    assert auth_client.get("/admin/users").status_code == 200

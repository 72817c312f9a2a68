import pytest

from cart.services import add_to_cart
from order.services import create_order

pytestmark = pytest.mark.django_db


def test_stats_on_empty_store(admin_client):
    res = admin_client.get("/admin/stats")

    assert res.status_code == 200
    # only the admin exists
    assert res.data == {"users": 1, "products": 0, "orders": 0, "revenue": "0.00"}


def test_stats_aggregate_revenue(admin_client, user, make_product):
    widget = make_product(name="Widget", price="10.00")
    gadget = make_product(name="Gadget", price="5.00")
    add_to_cart(user, widget, 2)
    add_to_cart(user, gadget, 1)
    create_order(user)
    add_to_cart(user, gadget, 3)
    create_order(user)

    res = admin_client.get("/admin/stats")

    assert res.data == {"users": 2, "products": 2, "orders": 2, "revenue": "40.00"}


def test_stats_forbidden_for_customers(auth_client):
    assert auth_client.get("/admin/stats").status_code == 403

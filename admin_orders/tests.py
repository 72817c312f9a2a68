import pytest
from django.apps import apps

from cart.services import add_to_cart
from order.models import Order
from order.services import create_order

pytestmark = pytest.mark.django_db


@pytest.fixture
def order(user, make_product):
    add_to_cart(user, make_product(name="Widget", price="10.00"), 2)
    return create_order(user)


def test_list_all_orders_with_user_and_items(admin_client, order, user):
    res = admin_client.get("/admin/orders")

    assert res.status_code == 200
    assert len(res.data) == 1
    row = res.data[0]
    assert row["user"] == {"id": user.id, "name": user.name, "email": user.email}
    assert row["total"] == "20.00"
    assert row["items"][0]["product_name"] == "Widget"


def test_filter_orders_by_status_and_search(admin_client, order, make_user, make_product):
    other = make_user(email="zed@example.com", name="Zed")
    add_to_cart(other, make_product(name="Gadget"), 1)
    other_order = create_order(other)
    Order.objects.filter(pk=other_order.pk).update(status=Order.STATUS_COMPLETED)

    assert [o["id"] for o in admin_client.get("/admin/orders", {"status": "completed"}).data] == [other_order.id]
    assert [o["id"] for o in admin_client.get("/admin/orders", {"search": "zed"}).data] == [other_order.id]
    assert [o["id"] for o in admin_client.get("/admin/orders", {"search": str(order.id)}).data] == [order.id]


def test_update_status(admin_client, order, monkeypatch, django_capture_on_commit_callbacks):
    relay = apps.get_app_config("chat").relay
    notified = []
    monkeypatch.setattr(relay, "notify_user_sync", lambda user_id, event: notified.append(user_id))

    with django_capture_on_commit_callbacks(execute=True):
        res = admin_client.put(f"/admin/orders/{order.id}/status", {"status": "completed"}, format="json")

    assert res.status_code == 200
    assert res.data["status"] == "completed"
    order.refresh_from_db()
    assert order.status == Order.STATUS_COMPLETED
    assert notified == [order.user_id]


def test_update_status_rejects_unknown_value(admin_client, order):
    res = admin_client.put(f"/admin/orders/{order.id}/status", {"status": "shipped"}, format="json")
    assert res.status_code == 400
    order.refresh_from_db()
    assert order.status == Order.STATUS_PENDING


def test_update_status_missing_order(admin_client, db):
    res = admin_client.put("/admin/orders/999999/status", {"status": "completed"}, format="json")
    assert res.status_code == 404


def test_status_change_does_not_touch_total(admin_client, order):
    admin_client.put(f"/admin/orders/{order.id}/status", {"status": "processing"}, format="json")
    order.refresh_from_db()
    assert str(order.total) == "20.00"


def test_customers_cannot_manage_orders(auth_client, order):
    assert auth_client.get("/admin/orders").status_code == 403
    res = auth_client.put(f"/admin/orders/{order.id}/status", {"status": "completed"}, format="json")
    assert res.status_code == 403

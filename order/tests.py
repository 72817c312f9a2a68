from decimal import Decimal

import pytest
from django.apps import apps

from cart import services as cart_services
from cart.models import CartItem
from order import services
from order.models import Order, OrderItem
from ecom_chat.exceptions import EmptyCart

pytestmark = pytest.mark.django_db


@pytest.fixture
def filled_cart(user, make_product):
    widget = make_product(name="Widget", price="10.00")
    gadget = make_product(name="Gadget", price="5.00")
    cart_services.add_to_cart(user, widget, 2)
    cart_services.add_to_cart(user, gadget, 1)
    return widget, gadget


def test_order_from_cart_worked_example(auth_client, user, filled_cart):
    assert auth_client.get("/cart").data["total"] == "25.00"

    res = auth_client.post("/orders")

    assert res.status_code == 201
    assert res.data["total"] == "25.00"
    assert res.data["status"] == "pending"
    assert sorted((i["product_name"], i["quantity"], i["price"]) for i in res.data["items"]) == [
        ("Gadget", 1, "5.00"),
        ("Widget", 2, "10.00"),
    ]
    assert auth_client.get("/cart").data["items"] == []
    assert not CartItem.objects.filter(cart__user=user).exists()


def test_order_total_equals_pre_order_cart_total(user, filled_cart):
    before = cart_services.get_cart(user).total
    order = services.create_order(user)
    assert order.total == before == Decimal("25.00")


def test_empty_cart_never_creates_order(auth_client, user, make_product):
    # no cart at all
    res = auth_client.post("/orders")
    assert res.status_code == 400
    assert res.data["detail"] == "Cart is empty."

    # cart exists but has no lines
    product = make_product()
    cart_services.add_to_cart(user, product, 1)
    cart_services.remove_from_cart(user, product.id)
    assert auth_client.post("/orders").status_code == 400

    assert Order.objects.count() == 0


def test_prices_are_frozen_after_product_change(auth_client, user, filled_cart):
    widget, _ = filled_cart
    order_id = auth_client.post("/orders").data["id"]

    widget.price = Decimal("99.00")
    widget.name = "Renamed"
    widget.save()

    res = auth_client.get(f"/orders/{order_id}")
    assert res.data["total"] == "25.00"
    item = next(i for i in res.data["items"] if i["product"] == widget.id)
    assert item["price"] == "10.00"
    assert item["product_name"] == "Widget"


def test_deleting_product_keeps_order_items(user, filled_cart):
    widget, _ = filled_cart
    order = services.create_order(user)

    widget.delete()

    item = OrderItem.objects.get(order=order, product_name="Widget")
    assert item.product is None
    assert item.price == Decimal("10.00")
    order.refresh_from_db()
    assert order.total == Decimal("25.00")


def test_failure_mid_order_rolls_back_everything(user, filled_cart, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(OrderItem.objects, "bulk_create", boom)

    with pytest.raises(RuntimeError):
        services.create_order(user)

    assert Order.objects.count() == 0
    assert CartItem.objects.filter(cart__user=user).count() == 2


def test_create_order_service_raises_empty_cart(user):
    with pytest.raises(EmptyCart):
        services.create_order(user)


def test_stock_is_not_decremented(user, filled_cart):
    widget, _ = filled_cart
    services.create_order(user)
    widget.refresh_from_db()
    assert widget.stock == 5


def test_list_orders_only_returns_own(auth_client, user, make_user, make_product, filled_cart):
    services.create_order(user)
    other = make_user(email="other@example.com")
    cart_services.add_to_cart(other, make_product(name="Other"), 1)
    other_order = services.create_order(other)

    res = auth_client.get("/orders")

    assert res.status_code == 200
    assert len(res.data) == 1
    assert auth_client.get(f"/orders/{other_order.id}").status_code == 404


def test_orders_require_auth(api_client, db):
    assert api_client.get("/orders").status_code == 401
    assert api_client.post("/orders").status_code == 401


def test_status_change_notifies_owner_after_commit(user, filled_cart, monkeypatch, django_capture_on_commit_callbacks):
    relay = apps.get_app_config("chat").relay
    sent = []
    monkeypatch.setattr(relay, "notify_user_sync", lambda user_id, event: sent.append((user_id, event)))

    order = services.create_order(user)
    assert sent == []

    with django_capture_on_commit_callbacks(execute=True):
        services.update_status(order, Order.STATUS_PROCESSING)

    assert sent == [(user.id, {
        "type": "order_status",
        "order_id": order.id,
        "status": "processing",
        "message": f"Your order #{order.id} is now processing",
    })]


def test_saving_same_status_sends_nothing(user, filled_cart, monkeypatch, django_capture_on_commit_callbacks):
    relay = apps.get_app_config("chat").relay
    sent = []
    monkeypatch.setattr(relay, "notify_user_sync", lambda user_id, event: sent.append(event))
    order = services.create_order(user)

    with django_capture_on_commit_callbacks(execute=True):
        services.update_status(order, Order.STATUS_PENDING)

    assert sent == []


def test_update_status_rejects_unknown_value(user, filled_cart):
    order = services.create_order(user)
    with pytest.raises(ValueError):
        services.update_status(order, "shipped")


def test_order_total_too_large_is_rejected_and_cart_kept(auth_client, admin_client, user, make_product):
    pricey = make_product(name="Yacht", price="99999999.99")
    cart_services.add_to_cart(user, pricey, 1000)

    res = auth_client.post("/orders")

    assert res.status_code == 400
    assert Order.objects.count() == 0
    assert CartItem.objects.get(cart__user=user).quantity == 1000
    assert auth_client.get("/orders").status_code == 200
    assert admin_client.get("/admin/orders").status_code == 200


def test_large_order_within_limit_is_accepted(user, make_product):
    product = make_product(price="9999999.99")
    cart_services.add_to_cart(user, product, 1000)

    order = services.create_order(user)

    assert order.total == Decimal("9999999990.00")
    assert order.total <= services.max_order_total()

from decimal import Decimal

import pytest

from cart.models import CartItem
from cart.services import add_to_cart
from order.models import OrderItem
from order.services import create_order
from product.models import Product

pytestmark = pytest.mark.django_db


def test_put_replaces_product(admin_client, make_product):
    product = make_product(description="old")

    res = admin_client.put(
        f"/admin/products/{product.id}",
        {"name": "Widget v2", "price": 12.5, "stock": 9},
        format="json",
    )

    assert res.status_code == 200
    product.refresh_from_db()
    assert product.name == "Widget v2"
    assert product.price == Decimal("12.50")
    assert product.stock == 9
    assert product.description == ""


def test_put_requires_all_fields(admin_client, make_product):
    product = make_product()
    res = admin_client.put(f"/admin/products/{product.id}", {"name": "Only name"}, format="json")
    assert res.status_code == 400


def test_patch_updates_some_fields(admin_client, make_product):
    product = make_product(description="keep me")
    res = admin_client.patch(f"/admin/products/{product.id}", {"stock": 0}, format="json")

    assert res.status_code == 200
    assert res.data["in_stock"] is False
    product.refresh_from_db()
    assert product.description == "keep me"


def test_put_validates_price(admin_client, make_product):
    product = make_product()
    res = admin_client.put(f"/admin/products/{product.id}", {"name": "W", "price": -1, "stock": 1}, format="json")
    assert res.status_code == 400


def test_update_missing_product(admin_client, db):
    res = admin_client.put("/admin/products/999999", {"name": "W", "price": 1, "stock": 1}, format="json")
    assert res.status_code == 404


def test_delete_product_keeps_order_history(admin_client, user, make_product):
    product = make_product()
    add_to_cart(user, product, 1)
    order = create_order(user)
    add_to_cart(user, product, 2)

    res = admin_client.delete(f"/admin/products/{product.id}")

    assert res.status_code == 204
    assert not Product.objects.filter(pk=product.pk).exists()
    assert not CartItem.objects.exists()
    assert OrderItem.objects.get(order=order).product_name == "Widget"
    assert admin_client.delete(f"/admin/products/{product.id}").status_code == 404


def test_customers_cannot_edit_products(auth_client, make_product):
    product = make_product()
    assert auth_client.put(f"/admin/products/{product.id}", {"name": "W", "price": 1, "stock": 1}, format="json").status_code == 403
    assert auth_client.delete(f"/admin/products/{product.id}").status_code == 403
    assert Product.objects.filter(pk=product.pk).exists()

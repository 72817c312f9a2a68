import random
from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from cart import services
from cart.models import Cart, CartItem, MAX_QUANTITY

pytestmark = pytest.mark.django_db


def add(client, product, quantity=1):
    return client.post("/cart", {"product_id": product.id, "quantity": quantity}, format="json")


def test_empty_cart_shape(auth_client):
    res = auth_client.get("/cart")
    assert res.status_code == 200
    assert res.data == {"id": None, "items": [], "total": "0.00"}


def test_cart_requires_auth(api_client, db):
    assert api_client.get("/cart").status_code == 401


def test_first_add_creates_cart_lazily(auth_client, user, make_product):
    product = make_product()
    assert not Cart.objects.filter(user=user).exists()

    res = add(auth_client, product, 2)

    assert res.status_code == 201
    assert Cart.objects.filter(user=user).exists()
    assert res.data["items"][0]["quantity"] == 2
    assert res.data["total"] == "20.00"


def test_adding_same_product_merges_quantity(auth_client, make_product):
    product = make_product()
    add(auth_client, product, 2)

    res = add(auth_client, product, 3)

    assert res.status_code == 200
    assert len(res.data["items"]) == 1
    assert res.data["items"][0]["quantity"] == 5
    assert CartItem.objects.count() == 1


def test_quantity_defaults_to_one(auth_client, make_product):
    product = make_product()
    res = auth_client.post("/cart", {"product_id": product.id}, format="json")
    assert res.data["items"][0]["quantity"] == 1


@pytest.mark.parametrize("quantity", [0, -1, "abc", MAX_QUANTITY + 1, 10 ** 12])
def test_add_rejects_bad_quantity(auth_client, make_product, quantity):
    product = make_product()
    res = auth_client.post("/cart", {"product_id": product.id, "quantity": quantity}, format="json")
    assert res.status_code == 400


def test_merge_past_line_limit_is_rejected(auth_client, make_product):
    product = make_product()
    add(auth_client, product, MAX_QUANTITY - 1)

    res = add(auth_client, product, 2)

    assert res.status_code == 400
    assert "quantity" in res.data
    assert CartItem.objects.get(product=product).quantity == MAX_QUANTITY - 1


def test_service_rejects_oversized_new_line(user, make_product):
    product = make_product()
    with pytest.raises(ValidationError):
        services.add_to_cart(user, product, MAX_QUANTITY + 1)
    assert not CartItem.objects.filter(cart__user=user).exists()


def test_update_quantity_above_limit_is_rejected(auth_client, make_product):
    product = make_product()
    add(auth_client, product, 1)

    res = auth_client.patch(f"/cart/{product.id}", {"quantity": MAX_QUANTITY + 1}, format="json")

    assert res.status_code == 400
    assert CartItem.objects.get(product=product).quantity == 1


def test_expensive_cart_still_renders(auth_client, make_product):
    product = make_product(price="99999999.99")
    add(auth_client, product, MAX_QUANTITY)

    res = auth_client.get("/cart")

    assert res.status_code == 200
    assert res.data["total"] == "99999999990.00"


def test_add_unknown_product_is_404(auth_client, db):
    res = auth_client.post("/cart", {"product_id": 424242, "quantity": 1}, format="json")
    assert res.status_code == 404


def test_remove_line_and_missing_line_is_noop(auth_client, make_product):
    widget = make_product(name="Widget")
    gadget = make_product(name="Gadget", price="5.00")
    add(auth_client, widget, 1)
    add(auth_client, gadget, 1)

    res = auth_client.delete(f"/cart/{widget.id}")
    assert res.status_code == 200
    assert [i["product"]["name"] for i in res.data["items"]] == ["Gadget"]

    again = auth_client.delete(f"/cart/{widget.id}")
    assert again.status_code == 200
    assert again.data["total"] == "5.00"


def test_remove_without_cart_is_noop(auth_client, make_product):
    product = make_product()
    res = auth_client.delete(f"/cart/{product.id}")
    assert res.status_code == 200
    assert res.data["items"] == []


def test_update_quantity(auth_client, make_product):
    product = make_product()
    add(auth_client, product, 1)

    res = auth_client.patch(f"/cart/{product.id}", {"quantity": 4}, format="json")

    assert res.status_code == 200
    assert res.data["total"] == "40.00"


def test_update_quantity_of_missing_line_is_404(auth_client, make_product):
    product = make_product()
    res = auth_client.patch(f"/cart/{product.id}", {"quantity": 4}, format="json")
    assert res.status_code == 404


def test_carts_are_per_user(auth_client, make_user, make_product):
    product = make_product()
    other = make_user(email="other@example.com")
    services.add_to_cart(other, product, 7)

    assert auth_client.get("/cart").data["items"] == []
    auth_client.delete(f"/cart/{product.id}")
    assert CartItem.objects.get(cart__user=other).quantity == 7


def test_total_tracks_live_prices(auth_client, make_product):
    product = make_product(price="10.00")
    add(auth_client, product, 3)

    product.price = Decimal("4.00")
    product.save()

    assert auth_client.get("/cart").data["total"] == "12.00"


def test_total_matches_lines_after_random_operations(user, make_product):
    rng = random.Random(1234)
    products = [make_product(name=f"P{i}", price=f"{i + 1}.25") for i in range(4)]
    services.add_to_cart(user, products[0], 1)

    for _ in range(40):
        product = rng.choice(products)
        if rng.random() < 0.7:
            services.add_to_cart(user, product, rng.randint(1, 3))
        else:
            services.remove_from_cart(user, product.id)

        cart = services.get_cart(user)
        expected = sum(
            (i.product.price * i.quantity for i in CartItem.objects.filter(cart=cart).select_related("product")),
            Decimal("0.00"),
        )
        assert cart.total == expected

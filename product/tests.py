import pytest

from product.models import Product

pytestmark = pytest.mark.django_db


def test_list_products_is_public(api_client, make_product):
    make_product(name="Widget")
    make_product(name="Gadget", price="5.00")

    res = api_client.get("/products")

    assert res.status_code == 200
    assert {p["name"] for p in res.data} == {"Widget", "Gadget"}


def test_product_detail_and_missing(api_client, make_product):
    product = make_product()
    assert api_client.get(f"/products/{product.id}").data["name"] == "Widget"
    assert api_client.get("/products/999999").status_code == 404


def test_search_and_ordering(api_client, make_product):
    make_product(name="Blue Widget", price="10.00")
    make_product(name="Red Gadget", price="3.00")
    make_product(name="Green Widget", price="7.50")

    res = api_client.get("/products", {"search": "widget", "ordering": "price"})

    assert [p["name"] for p in res.data] == ["Green Widget", "Blue Widget"]


def test_price_range_filter(api_client, make_product):
    make_product(name="Cheap", price="2.00")
    make_product(name="Pricey", price="200.00")

    res = api_client.get("/products", {"price__lte": "50"})

    assert [p["name"] for p in res.data] == ["Cheap"]


def test_admin_creates_product(admin_client):
    res = admin_client.post(
        "/products",
        {"name": "Widget", "description": "A widget", "price": 10, "stock": 3},
        format="json",
    )

    assert res.status_code == 201
    assert res.data["price"] == "10.00"
    assert res.data["in_stock"] is True
    assert Product.objects.get(pk=res.data["id"]).description == "A widget"


def test_create_product_requires_admin(api_client, auth_client):
    payload = {"name": "Widget", "price": 10, "stock": 3}
    assert api_client.post("/products", payload, format="json").status_code == 401
    assert auth_client.post("/products", payload, format="json").status_code == 403
    assert Product.objects.count() == 0


@pytest.mark.parametrize("payload", [
    {"name": "", "price": 10, "stock": 1},
    {"name": "Widget", "price": 0, "stock": 1},
    {"name": "Widget", "price": -4, "stock": 1},
    {"name": "Widget", "price": 10, "stock": -1},
    {"name": "Widget", "price": 10, "stock": 1.5},
    {"name": "Widget", "stock": 1},
])
def test_create_product_validation(admin_client, payload):
    res = admin_client.post("/products", payload, format="json")
    assert res.status_code == 400
    assert Product.objects.count() == 0


def test_catalog_does_not_accept_updates(admin_client, make_product):
    product = make_product()
    res = admin_client.put(f"/products/{product.id}", {"name": "X", "price": 1, "stock": 1}, format="json")
    assert res.status_code == 405

import pytest
from decimal import Decimal
from rest_framework.test import APIClient

from product.models import Product
from user.models import User
from user.views import issue_tokens


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    def _make_user(email="shopper@example.com", password="secret123", name="Shopper", **extra):
        return User.objects.create_user(email=email, password=password, name=name, **extra)
    return _make_user


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def admin_user(make_user):
    return make_user(email="boss@example.com", name="Boss", is_staff=True)


def _client_for(user):
    client = APIClient()
    access, _ = issue_tokens(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
    return client


@pytest.fixture
def auth_client(user):
    return _client_for(user)


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def make_product(db):
    def _make_product(name="Widget", price="10.00", stock=5, description=""):
        return Product.objects.create(name=name, price=Decimal(price), stock=stock, description=description)
    return _make_product

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from user.models import User

pytestmark = pytest.mark.django_db


def register(client, email="new@example.com", password="secret123", name="New"):
    return client.post("/auth/register", {"email": email, "name": name, "password": password}, format="json")


def test_register_returns_usable_token(api_client):
    res = register(api_client)

    assert res.status_code == 201
    assert res.data["user"]["email"] == "new@example.com"
    assert res.data["user"]["name"] == "New"
    assert "password" not in res.data["user"]

    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {res.data['token']}")
    me = api_client.get("/auth/me")
    assert me.status_code == 200
    assert me.data["email"] == "new@example.com"
    assert me.data["is_admin"] is False


def test_register_hashes_password(api_client):
    register(api_client, password="secret123")
    user = User.objects.get(email="new@example.com")
    assert user.password != "secret123"
    assert user.check_password("secret123")


def test_register_duplicate_email_conflicts(api_client, user):
    res = register(api_client, email=user.email)
    assert res.status_code == 409
    assert User.objects.filter(email=user.email).count() == 1


def test_register_duplicate_email_ignores_case(api_client, user):
    res = register(api_client, email=user.email.upper())
    assert res.status_code == 409


def test_register_name_is_optional(api_client):
    res = api_client.post("/auth/register", {"email": "anon@example.com", "password": "secret123"}, format="json")
    assert res.status_code == 201
    assert res.data["user"]["name"] == ""


@pytest.mark.parametrize("payload", [
    {"email": "not-an-email", "password": "secret123"},
    {"email": "short@example.com", "password": "123"},
    {"password": "secret123"},
])
def test_register_validation_errors(api_client, payload):
    res = api_client.post("/auth/register", payload, format="json")
    assert res.status_code == 400


def test_login_returns_admin_flag_and_cookie(api_client, admin_user):
    res = api_client.post("/auth/login", {"email": admin_user.email, "password": "secret123"}, format="json")

    assert res.status_code == 200
    assert res.data["user"]["is_admin"] is True
    assert res.data["token"]
    assert "access_token" in res.cookies


def test_login_wrong_password_is_unauthorized(api_client, user):
    res = api_client.post("/auth/login", {"email": user.email, "password": "wrong-pass"}, format="json")
    assert res.status_code == 401


def test_login_unknown_email_is_unauthorized(api_client, db):
    res = api_client.post("/auth/login", {"email": "ghost@example.com", "password": "secret123"}, format="json")
    assert res.status_code == 401


def test_cookie_authenticates_requests(api_client, user):
    login = api_client.post("/auth/login", {"email": user.email, "password": "secret123"}, format="json")
    assert login.status_code == 200

    # the test client keeps the cookie set by the login response
    me = api_client.get("/auth/me")
    assert me.status_code == 200
    assert me.data["id"] == user.id


def test_profile_requires_token(api_client, db):
    assert api_client.get("/auth/me").status_code == 401


def test_profile_rejects_garbage_token(api_client, db):
    api_client.credentials(HTTP_AUTHORIZATION="Bearer not.a.token")
    assert api_client.get("/auth/me").status_code == 401


def test_profile_reflects_current_admin_flag(auth_client, user):
    assert auth_client.get("/auth/me").data["is_admin"] is False
    user.is_staff = True
    user.save()
    assert auth_client.get("/auth/me").data["is_admin"] is True


def test_logout_clears_cookie(auth_client):
    res = auth_client.post("/auth/logout")
    assert res.status_code == 200
    assert res.cookies["access_token"].value == ""


def test_promote_admin_command(user):
    call_command("promote_admin", user.email)
    user.refresh_from_db()
    assert user.is_staff

    call_command("promote_admin", user.email, "--revoke")
    user.refresh_from_db()
    assert not user.is_staff


def test_promote_admin_unknown_email(db):
    with pytest.raises(CommandError):
        call_command("promote_admin", "nobody@example.com")


def test_login_ignores_email_case(api_client):
    register(api_client, email="Bob@Example.com")

    res = api_client.post("/auth/login", {"email": "bob@example.com", "password": "secret123"}, format="json")

    assert res.status_code == 200
    assert res.data["user"]["email"] == "Bob@example.com"

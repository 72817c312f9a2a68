import pytest
from rest_framework.test import APIRequestFactory

from ecom_chat.exceptions import api_exception_handler
from user.views import issue_tokens


@pytest.mark.django_db
def test_root_and_health(client):
    assert client.get("/").content == b"API running"
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


@pytest.mark.django_db
def test_schema_is_served(client):
    res = client.get("/schema/", HTTP_ACCEPT="application/json")
    assert res.status_code == 200


def test_unexpected_errors_become_generic_500(caplog):
    request = APIRequestFactory().get("/")
    response = api_exception_handler(RuntimeError("db exploded"), {"view": None, "request": request})

    assert response.status_code == 500
    assert response.data == {"detail": "Internal server error"}
    assert "db exploded" not in str(response.data)
    assert any("Unhandled error" in r.getMessage() for r in caplog.records)


async def open_with_origin(user, origin):
    from channels.testing import WebsocketCommunicator
    from ecom_chat.asgi import application

    communicator = WebsocketCommunicator(
        application,
        "/ws/chat/",
        headers=[
            (b"origin", origin.encode()),
            (b"cookie", f"access_token={issue_tokens(user)[0]}".encode()),
        ],
    )
    connected, _ = await communicator.connect()
    return communicator, connected


@pytest.mark.django_db(transaction=True)
async def test_socket_rejects_foreign_origin(user):
    communicator, connected = await open_with_origin(user, "http://evil.example")
    assert not connected


@pytest.mark.django_db(transaction=True)
async def test_socket_accepts_allowed_origin(user):
    communicator, connected = await open_with_origin(user, "http://localhost:5173")
    assert connected
    await communicator.disconnect()

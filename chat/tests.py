import pytest
from django.apps import apps
from channels.db import database_sync_to_async
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator

from chat.models import Message
from chat.relay import MessageRelay
from chat.routing import build_websocket_urlpatterns
from chat.sessions import SessionManager
from chat.ws_middleware import JWTAuthMiddleware
from user.views import issue_tokens


class RecordingLayer:
    """Stand-in channel layer that records sends and can fail for chosen channels."""

    def __init__(self, failing=()):
        self.sent = []
        self.failing = set(failing)

    async def send(self, channel, message):
        if channel in self.failing:
            raise RuntimeError("channel gone")
        self.sent.append((channel, message))


# --- SessionManager -------------------------------------------------------

def test_join_and_disconnect_bookkeeping():
    sessions = SessionManager(channel_layer=RecordingLayer())
    sessions.connect("c1")
    sessions.join(1, "c1")
    sessions.join("1", "c2")
    sessions.connect("c3")

    assert sessions.all_channels() == {"c1", "c2", "c3"}
    assert sessions.channels_for(1) == {"c1", "c2"}
    assert sessions.is_online(1)
    assert not sessions.is_online(2)

    sessions.disconnect("c1")
    sessions.disconnect("c2")

    assert sessions.channels_for(1) == set()
    assert not sessions.is_online(1)
    assert sessions.all_channels() == {"c3"}
    assert sessions.online_users() == []


def test_rejoin_as_other_user_moves_connection():
    sessions = SessionManager(channel_layer=RecordingLayer())
    sessions.join(1, "c1")
    sessions.join(2, "c1")

    assert sessions.channels_for(1) == set()
    assert sessions.channels_for(2) == {"c1"}


def test_disconnect_unknown_channel_is_harmless():
    sessions = SessionManager(channel_layer=RecordingLayer())
    sessions.disconnect("never-connected")
    assert sessions.all_channels() == set()


def test_snapshots_are_copies():
    sessions = SessionManager(channel_layer=RecordingLayer())
    sessions.join(1, "c1")
    snapshot = sessions.channels_for(1)
    snapshot.add("c9")
    assert sessions.channels_for(1) == {"c1"}


async def test_deliver_skips_failing_connections():
    layer = RecordingLayer(failing={"bad"})
    sessions = SessionManager(channel_layer=layer)

    delivered = await sessions.deliver(["good", "bad", "also-good"], {"type": "ping"})

    assert delivered == 2
    assert [channel for channel, _ in layer.sent] == ["good", "also-good"]
    assert layer.sent[0][1] == {"type": "chat.event", "event": {"type": "ping"}}


# --- MessageRelay ---------------------------------------------------------

@pytest.fixture
def layer():
    return RecordingLayer()


@pytest.fixture
def relay(layer):
    return MessageRelay(SessionManager(channel_layer=layer))


@pytest.mark.django_db
def test_post_message_persists_with_author(relay, user):
    message = relay.post_message(user, "  hello there  ")

    assert message.pk is not None
    assert message.content == "hello there"
    assert message.user == user


@pytest.mark.django_db
@pytest.mark.parametrize("content", ["", "   ", None, "x" * 2001])
def test_post_message_rejects_bad_content(relay, user, content):
    with pytest.raises(ValueError):
        relay.post_message(user, content)
    assert Message.objects.count() == 0


@pytest.mark.django_db
def test_publish_broadcasts_to_every_connection(relay, layer, user):
    relay.sessions.connect("anon-tab")
    relay.sessions.join(user.id, "user-tab")
    message = relay.post_message(user, "hi all")

    assert relay.publish_sync(message) == 2

    assert {channel for channel, _ in layer.sent} == {"anon-tab", "user-tab"}
    event = layer.sent[0][1]["event"]
    assert event["type"] == "new_message"
    assert event["message"]["content"] == "hi all"
    assert event["message"]["user"] == {"id": user.id, "email": user.email, "name": user.name}


@pytest.mark.django_db
def test_publish_directed_reaches_only_recipient(relay, layer, user, make_user):
    bob = make_user(email="bob@example.com")
    relay.sessions.join(user.id, "alice-tab")
    relay.sessions.join(bob.id, "bob-tab-1")
    relay.sessions.join(bob.id, "bob-tab-2")
    message = relay.post_message(user, "psst")

    assert relay.publish_sync(message, recipient_id=bob.id) == 2
    assert {channel for channel, _ in layer.sent} == {"bob-tab-1", "bob-tab-2"}


@pytest.mark.django_db
def test_publish_to_offline_recipient_delivers_nothing(relay, layer, user):
    relay.sessions.connect("someone")
    message = relay.post_message(user, "anyone?")

    assert relay.publish_sync(message, recipient_id=404) == 0
    assert layer.sent == []


# --- HTTP history -----------------------------------------------------------

@pytest.mark.django_db
def test_history_is_public_and_oldest_first(api_client, user):
    Message.objects.create(user=user, content="first")
    Message.objects.create(user=user, content="second")

    res = api_client.get("/messages")

    assert res.status_code == 200
    assert [m["content"] for m in res.data] == ["first", "second"]
    assert res.data[0]["user"]["email"] == user.email


@pytest.mark.django_db
def test_post_message_requires_auth(api_client):
    assert api_client.post("/messages", {"content": "hi"}, format="json").status_code == 401


@pytest.mark.django_db
def test_post_message_persists_then_publishes(auth_client, user, monkeypatch, django_capture_on_commit_callbacks):
    app_relay = apps.get_app_config("chat").relay
    published = []
    monkeypatch.setattr(app_relay, "publish_sync", lambda message, recipient_id=None: published.append((message.id, recipient_id)))

    with django_capture_on_commit_callbacks(execute=True):
        res = auth_client.post("/messages", {"content": "hello", "recipient_id": 7}, format="json")

    assert res.status_code == 201
    assert res.data["user"]["id"] == user.id
    assert published == [(res.data["id"], 7)]


@pytest.mark.django_db
def test_post_message_author_is_caller_not_payload(auth_client, user, make_user):
    other = make_user(email="other@example.com")
    res = auth_client.post("/messages", {"content": "hello", "user_id": other.id}, format="json")
    assert res.data["user"]["id"] == user.id


@pytest.mark.django_db
@pytest.mark.parametrize("payload", [{}, {"content": ""}, {"content": "   "}])
def test_post_message_validation(auth_client, payload):
    res = auth_client.post("/messages", payload, format="json")
    assert res.status_code == 400
    assert Message.objects.count() == 0


# --- WebSocket ---------------------------------------------------------------

@pytest.fixture
def live_relay():
    # real in-memory channel layer, fresh registry per test
    return MessageRelay(SessionManager())


@pytest.fixture
def ws_app(live_relay):
    return JWTAuthMiddleware(URLRouter(build_websocket_urlpatterns(live_relay)))


@pytest.fixture
def alice(make_user):
    return make_user(email="alice@example.com", name="Alice")


@pytest.fixture
def bob(make_user):
    return make_user(email="bob@example.com", name="Bob")


def token_for(user):
    return issue_tokens(user)[0]


async def open_socket(app, token):
    communicator = WebsocketCommunicator(app, f"/ws/chat/?token={token}")
    connected, _ = await communicator.connect()
    assert connected
    return communicator


async def join(communicator, user_id):
    await communicator.send_json_to({"type": "join", "user_id": user_id})
    reply = await communicator.receive_json_from()
    assert reply == {"type": "joined", "user_id": user_id}


@pytest.mark.django_db(transaction=True)
async def test_anonymous_socket_is_rejected(ws_app):
    communicator = WebsocketCommunicator(ws_app, "/ws/chat/")
    connected, _ = await communicator.connect()
    assert not connected


@pytest.mark.django_db(transaction=True)
async def test_invalid_token_is_rejected(ws_app):
    communicator = WebsocketCommunicator(ws_app, "/ws/chat/?token=garbage")
    connected, _ = await communicator.connect()
    assert not connected


@pytest.mark.django_db(transaction=True)
async def test_refresh_token_is_not_accepted(ws_app, alice):
    refresh = issue_tokens(alice)[1]
    communicator = WebsocketCommunicator(ws_app, f"/ws/chat/?token={refresh}")
    connected, _ = await communicator.connect()
    assert not connected


@pytest.mark.django_db(transaction=True)
async def test_token_in_cookie_is_accepted(ws_app, alice):
    communicator = WebsocketCommunicator(
        ws_app, "/ws/chat/", headers=[(b"cookie", f"access_token={token_for(alice)}".encode())]
    )
    connected, _ = await communicator.connect()
    assert connected
    await communicator.disconnect()


@pytest.mark.django_db(transaction=True)
async def test_broadcast_reaches_both_sessions(ws_app, alice, bob):
    alice_ws = await open_socket(ws_app, token_for(alice))
    bob_ws = await open_socket(ws_app, token_for(bob))
    await join(alice_ws, alice.id)
    await join(bob_ws, bob.id)

    await alice_ws.send_json_to({"type": "send_message", "user_id": alice.id, "content": "hello everyone"})

    for ws in (alice_ws, bob_ws):
        event = await ws.receive_json_from(timeout=3)
        assert event["type"] == "new_message"
        assert event["message"]["content"] == "hello everyone"
        assert event["message"]["user"]["id"] == alice.id

    assert await database_sync_to_async(Message.objects.count)() == 1
    await alice_ws.disconnect()
    await bob_ws.disconnect()


@pytest.mark.django_db(transaction=True)
async def test_directed_message_reaches_only_recipient(ws_app, alice, bob):
    alice_ws = await open_socket(ws_app, token_for(alice))
    bob_ws = await open_socket(ws_app, token_for(bob))
    await join(alice_ws, alice.id)
    await join(bob_ws, bob.id)

    await alice_ws.send_json_to({"type": "send_message", "content": "just for bob", "recipient_id": bob.id})

    event = await bob_ws.receive_json_from(timeout=3)
    assert event["message"]["content"] == "just for bob"
    assert await alice_ws.receive_nothing(timeout=0.3)

    await alice_ws.disconnect()
    await bob_ws.disconnect()


@pytest.mark.django_db(transaction=True)
async def test_recipient_id_as_numeric_string_is_directed(ws_app, alice, bob):
    alice_ws = await open_socket(ws_app, token_for(alice))
    bob_ws = await open_socket(ws_app, token_for(bob))
    await join(bob_ws, bob.id)

    await alice_ws.send_json_to({"type": "send_message", "content": "hi bob", "recipient_id": str(bob.id)})

    assert (await bob_ws.receive_json_from(timeout=3))["message"]["content"] == "hi bob"
    assert await alice_ws.receive_nothing(timeout=0.3)

    await alice_ws.disconnect()
    await bob_ws.disconnect()


@pytest.mark.django_db(transaction=True)
@pytest.mark.parametrize("recipient_id", [[1], {"id": 1}, "bob", True, -3, 1.5])
async def test_malformed_recipient_id_gets_error(ws_app, alice, recipient_id):
    alice_ws = await open_socket(ws_app, token_for(alice))

    await alice_ws.send_json_to({"type": "send_message", "content": "to whom?", "recipient_id": recipient_id})

    event = await alice_ws.receive_json_from()
    assert event == {"type": "error", "detail": "recipient_id must be a user id"}
    assert await database_sync_to_async(Message.objects.count)() == 0
    await alice_ws.disconnect()


@pytest.mark.django_db(transaction=True)
async def test_unjoined_socket_still_hears_broadcasts(ws_app, alice, bob):
    alice_ws = await open_socket(ws_app, token_for(alice))
    bob_ws = await open_socket(ws_app, token_for(bob))

    await alice_ws.send_json_to({"type": "send_message", "content": "anyone here?"})

    event = await bob_ws.receive_json_from(timeout=3)
    assert event["message"]["content"] == "anyone here?"
    await alice_ws.disconnect()
    await bob_ws.disconnect()


@pytest.mark.django_db(transaction=True)
async def test_late_joiner_gets_no_replay(ws_app, alice, bob):
    alice_ws = await open_socket(ws_app, token_for(alice))
    await alice_ws.send_json_to({"type": "send_message", "content": "before bob"})
    assert (await alice_ws.receive_json_from(timeout=3))["type"] == "new_message"

    bob_ws = await open_socket(ws_app, token_for(bob))
    await join(bob_ws, bob.id)
    assert await bob_ws.receive_nothing(timeout=0.3)

    await alice_ws.disconnect()
    await bob_ws.disconnect()


@pytest.mark.django_db(transaction=True)
async def test_cannot_impersonate_other_user(ws_app, alice, bob):
    alice_ws = await open_socket(ws_app, token_for(alice))

    await alice_ws.send_json_to({"type": "join", "user_id": bob.id})
    assert (await alice_ws.receive_json_from())["type"] == "error"

    await alice_ws.send_json_to({"type": "send_message", "user_id": bob.id, "content": "I am bob"})
    assert (await alice_ws.receive_json_from())["type"] == "error"

    assert await database_sync_to_async(Message.objects.count)() == 0
    await alice_ws.disconnect()


@pytest.mark.django_db(transaction=True)
async def test_bad_events_get_error_and_socket_stays_open(ws_app, alice):
    alice_ws = await open_socket(ws_app, token_for(alice))

    await alice_ws.send_to(text_data="{not json")
    assert (await alice_ws.receive_json_from())["detail"] == "Malformed JSON"

    await alice_ws.send_json_to({"type": "dance"})
    assert (await alice_ws.receive_json_from())["type"] == "error"

    await alice_ws.send_json_to(["not", "an", "object"])
    assert (await alice_ws.receive_json_from())["type"] == "error"

    await alice_ws.send_json_to({"type": "send_message", "content": "   "})
    assert (await alice_ws.receive_json_from())["detail"] == "Message content is required"

    await join(alice_ws, alice.id)
    await alice_ws.disconnect()


@pytest.mark.django_db(transaction=True)
async def test_disconnect_unregisters_session(ws_app, live_relay, alice):
    alice_ws = await open_socket(ws_app, token_for(alice))
    await join(alice_ws, alice.id)
    assert live_relay.sessions.is_online(alice.id)

    await alice_ws.disconnect()

    assert not live_relay.sessions.is_online(alice.id)
    assert live_relay.sessions.all_channels() == set()


@pytest.mark.django_db(transaction=True)
async def test_order_status_event_reaches_owner(ws_app, live_relay, alice):
    alice_ws = await open_socket(ws_app, token_for(alice))
    await join(alice_ws, alice.id)

    event = {"type": "order_status", "order_id": 1, "status": "completed", "message": "Your order #1 is now completed"}
    assert await live_relay.notify_user(alice.id, event) == 1

    assert await alice_ws.receive_json_from(timeout=3) == event
    await alice_ws.disconnect()

import logging

from django.apps import apps
from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

logger = logging.getLogger(__name__)

CLOSE_UNAUTHENTICATED = 4401


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """
    Live chat socket.

    Client events:
        {"type": "join", "user_id": <id>}
        {"type": "send_message", "content": "...", "recipient_id": <id, optional>}
    Server events:
        {"type": "new_message", "message": {...}}
        {"type": "order_status", "order_id": ..., "status": ..., "message": ...}
        {"type": "error", "detail": "..."}
    """

    relay = None

    def __init__(self, *args, relay=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.relay = relay or apps.get_app_config("chat").relay

    async def connect(self):
        user = self.scope.get("user")  # set by JWTAuthMiddleware

        if user is None or user.is_anonymous:
            await self.close(code=CLOSE_UNAUTHENTICATED)
            return

        self.user = user
        # every accepted socket hears broadcasts, joined or not
        self.relay.sessions.connect(self.channel_name)
        await self.accept()
        logger.info("Chat connection %s opened for user %s", self.channel_name, user.id)

    async def disconnect(self, code):
        self.relay.sessions.disconnect(self.channel_name)
        logger.info("Chat connection %s closed (%s)", self.channel_name, code)

    async def receive(self, text_data=None, bytes_data=None, **kwargs):
        if text_data is None:
            await self.send_error("Only JSON text frames are supported")
            return
        try:
            content = await self.decode_json(text_data)
        except ValueError:
            await self.send_error("Malformed JSON")
            return
        await self.receive_json(content, **kwargs)

    async def receive_json(self, content, **kwargs):
        if not isinstance(content, dict):
            await self.send_error("Events must be JSON objects")
            return

        handlers = {
            "join": self.handle_join,
            "send_message": self.handle_send_message,
        }
        handler = handlers.get(content.get("type"))
        if handler is None:
            await self.send_error(f"Unknown event type: {content.get('type')!r}")
            return
        await handler(content)

    async def handle_join(self, content):
        user_id = content.get("user_id", self.user.id)
        if str(user_id) != str(self.user.id):
            await self.send_error("Cannot join as another user")
            return
        self.relay.sessions.join(self.user.id, self.channel_name)
        await self.send_json({"type": "joined", "user_id": self.user.id})

    async def handle_send_message(self, content):
        author_id = content.get("user_id")
        if author_id is not None and str(author_id) != str(self.user.id):
            await self.send_error("Cannot send as another user")
            return

        text = content.get("content")
        if not isinstance(text, str):
            await self.send_error("content must be a string")
            return

        recipient_id = content.get("recipient_id")
        if recipient_id is not None:
            valid = isinstance(recipient_id, (int, str)) and not isinstance(recipient_id, bool)
            if not valid or not str(recipient_id).isdigit():
                await self.send_error("recipient_id must be a user id")
                return
            recipient_id = int(recipient_id)

        try:
            message = await database_sync_to_async(self.relay.post_message)(self.user, text)
        except ValueError as exc:
            await self.send_error(str(exc))
            return
        except Exception:
            logger.exception("Failed to store chat message from user %s", self.user.id)
            await self.send_error("Failed to send message")
            return

        await self.relay.publish(message, recipient_id)

    async def chat_event(self, event):  # Handler for events pushed by SessionManager.deliver
        await self.send_json(event["event"])

    async def send_error(self, detail):
        await self.send_json({"type": "error", "detail": detail})

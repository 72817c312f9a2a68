import logging

from asgiref.sync import async_to_sync

from .models import Message, MAX_MESSAGE_LENGTH
from .serializers import MessageSerializer

logger = logging.getLogger(__name__)


class MessageRelay:
    """Persists chat messages and fans them out through a SessionManager."""

    def __init__(self, sessions):
        self.sessions = sessions

    def post_message(self, author, content):
        content = (content or "").strip()
        if not content:
            raise ValueError("Message content is required")
        if len(content) > MAX_MESSAGE_LENGTH:
            raise ValueError(f"Message content is limited to {MAX_MESSAGE_LENGTH} characters")
        # author is attached in memory, so serializing needs no further queries
        return Message.objects.create(user=author, content=content)

    async def publish(self, message, recipient_id=None):
        """
        Send ``message`` to every live connection, or only to the connections
        of ``recipient_id`` when given. Connections that join later get nothing.
        """
        event = {"type": "new_message", "message": dict(MessageSerializer(message).data)}
        if recipient_id is None:
            channels = self.sessions.all_channels()
        else:
            channels = self.sessions.channels_for(recipient_id)
        delivered = await self.sessions.deliver(channels, event)
        logger.info(
            "Message %s delivered to %s/%s connections (recipient=%s)",
            message.id, delivered, len(channels), recipient_id,
        )
        return delivered

    async def notify_user(self, user_id, event):
        return await self.sessions.deliver(self.sessions.channels_for(user_id), event)

    def publish_sync(self, message, recipient_id=None):
        try:
            return async_to_sync(self.publish)(message, recipient_id)
        except Exception:
            logger.exception("Failed to publish message %s", message.id)
            return 0

    def notify_user_sync(self, user_id, event):
        try:
            return async_to_sync(self.notify_user)(user_id, event)
        except Exception:
            logger.exception("Failed to notify user %s", user_id)
            return 0

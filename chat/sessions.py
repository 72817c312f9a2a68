import logging
import threading
from collections import defaultdict

from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Registry of live chat connections.

    Every accepted socket is tracked by its channel name; a ``join`` also files
    it under a user id so directed messages reach all of that user's tabs.
    Delivery goes through the channel layer and is best-effort: one attempt per
    connection, failures are logged and skipped.
    """

    def __init__(self, channel_layer=None):
        self._channel_layer = channel_layer
        self._lock = threading.Lock()
        self._channels = set()
        self._by_user = defaultdict(set)
        self._user_of = {}

    @property
    def channel_layer(self):
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer()
        return self._channel_layer

    @staticmethod
    def _key(user_id):
        return str(user_id)

    def connect(self, channel_name):
        with self._lock:
            self._channels.add(channel_name)

    def join(self, user_id, channel_name):
        key = self._key(user_id)
        with self._lock:
            previous = self._user_of.get(channel_name)
            if previous is not None and previous != key:
                self._discard_from_user(previous, channel_name)
            self._channels.add(channel_name)
            self._by_user[key].add(channel_name)
            self._user_of[channel_name] = key

    def disconnect(self, channel_name):
        with self._lock:
            self._channels.discard(channel_name)
            key = self._user_of.pop(channel_name, None)
            if key is not None:
                self._discard_from_user(key, channel_name)

    def _discard_from_user(self, key, channel_name):
        channels = self._by_user.get(key)
        if channels is None:
            return
        channels.discard(channel_name)
        if not channels:
            del self._by_user[key]

    def channels_for(self, user_id):
        with self._lock:
            return set(self._by_user.get(self._key(user_id), ()))

    def all_channels(self):
        with self._lock:
            return set(self._channels)

    def is_online(self, user_id):
        with self._lock:
            return self._key(user_id) in self._by_user

    def online_users(self):
        with self._lock:
            return sorted(self._by_user)

    async def deliver(self, channels, event):
        """Push ``event`` to each channel once. Returns how many sends succeeded."""
        delivered = 0
        for channel_name in channels:
            try:
                await self.channel_layer.send(channel_name, {"type": "chat.event", "event": event})
            except Exception:
                logger.warning("Dropping %s event for %s", event.get("type"), channel_name, exc_info=True)
                continue
            delivered += 1
        return delivered

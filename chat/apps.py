from django.apps import AppConfig


class ChatConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"

    def ready(self):
        from .relay import MessageRelay
        from .sessions import SessionManager

        # one registry per process, shared by the socket consumer and HTTP views
        self.sessions = SessionManager()
        self.relay = MessageRelay(self.sessions)

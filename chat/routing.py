from django.apps import apps
from django.urls import path

from .consumers import ChatConsumer


def build_websocket_urlpatterns(relay):
    return [
        path("ws/chat/", ChatConsumer.as_asgi(relay=relay)),
    ]


websocket_urlpatterns = build_websocket_urlpatterns(apps.get_app_config("chat").relay)

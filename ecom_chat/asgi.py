import os
# Daphne starts Django outside of manage.py.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "ecom_chat.settings")

from django.core.asgi import get_asgi_application

# apps must be loaded before the websocket routing pulls in models
django_asgi_app = get_asgi_application()

from channels.routing import ProtocolTypeRouter, URLRouter
from channels.security.websocket import AllowedHostsOriginValidator
from chat.routing import websocket_urlpatterns
from chat.ws_middleware import JWTAuthMiddleware

application = ProtocolTypeRouter({
    "http": django_asgi_app,  # normal HTTP requests
    # the socket trusts the auth cookie, so only origins in ALLOWED_HOSTS may open it
    "websocket": AllowedHostsOriginValidator(
        JWTAuthMiddleware(URLRouter(websocket_urlpatterns))
    ),
})

from urllib.parse import parse_qs

from django.conf import settings
from channels.db import database_sync_to_async
import jwt

# Take the JWT from the query string, header or cookie, verify it, attach the user to the socket
@database_sync_to_async
def get_user(user_id):
    from django.contrib.auth import get_user_model
    from django.contrib.auth.models import AnonymousUser

    User = get_user_model()
    try:
        return User.objects.get(id=user_id, is_active=True)
    except User.DoesNotExist:
        return AnonymousUser()


def extract_token(scope):
    query = parse_qs(scope.get("query_string", b"").decode())
    if query.get("token"):
        return query["token"][0]

    headers = dict(scope.get("headers", []))  # Get headers from scope

    auth = headers.get(b"authorization", b"").decode()
    if auth.lower().startswith("bearer "):
        return auth.split(" ", 1)[1].strip()

    cookies = headers.get(b"cookie", b"").decode()
    for part in cookies.split(";"):
        if part.strip().startswith("access_token="):  # Look for access_token cookie
            return part.split("=", 1)[1].strip()
    return None


class JWTAuthMiddleware:
    def __init__(self, inner):
        self.inner = inner

    async def __call__(self, scope, receive, send):
        from django.contrib.auth.models import AnonymousUser

        scope = dict(scope)
        token = extract_token(scope)

        if not token:
            scope["user"] = AnonymousUser()
            return await self.inner(scope, receive, send)

        try:
            payload = jwt.decode(
                token,
                settings.SIMPLE_JWT["SIGNING_KEY"],
                algorithms=[settings.SIMPLE_JWT["ALGORITHM"]],
            )
        except jwt.InvalidTokenError:
            payload = None

        if payload and payload.get("token_type") == "access" and "user_id" in payload:
            scope["user"] = await get_user(payload["user_id"])
        else:
            scope["user"] = AnonymousUser()

        return await self.inner(scope, receive, send)

from django.utils.deprecation import MiddlewareMixin

AUTH_COOKIE_NAME = "access_token"


class JWTAuthCookieMiddleware(MiddlewareMixin):
    """Let browser clients authenticate with the HttpOnly cookie set at login."""

    def process_request(self, request):
        # an explicit Authorization header always wins
        if request.META.get("HTTP_AUTHORIZATION"):
            return None
        token = request.COOKIES.get(AUTH_COOKIE_NAME)
        if token:
            request.META["HTTP_AUTHORIZATION"] = f"Bearer {token}"
        return None

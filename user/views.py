# user/views.py
import logging

from django.conf import settings
from django.contrib.auth import authenticate
from django.db import IntegrityError, transaction
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from ecom_chat.exceptions import Conflict
from ecom_chat.middleware.jwt_cookie_middleware import AUTH_COOKIE_NAME
from .models import User
from .serializers import RegisterSerializer, LoginSerializer, UserSerializer, ProfileSerializer

logger = logging.getLogger(__name__)


def issue_tokens(user):
    refresh = RefreshToken.for_user(user)
    return str(refresh.access_token), str(refresh)


class RegisterView(APIView):
    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if User.objects.filter(email__iexact=data["email"]).exists():
            raise Conflict("Email already registered")

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    email=data["email"], password=data["password"], name=data.get("name", "")
                )
        except IntegrityError:
            # lost a race with a concurrent signup for the same email
            raise Conflict("Email already registered")

        logger.info("Registered user id=%s", user.id)
        access, refresh = issue_tokens(user)
        return Response(
            {"user": UserSerializer(user).data, "token": access, "refresh": refresh},
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        email = serializer.validated_data["email"]
        password = serializer.validated_data["password"]

        # emails are unique regardless of case, so resolve the stored spelling first
        account = User.objects.filter(email__iexact=email).first()
        if account is not None:
            email = account.email

        user = authenticate(request, email=email, password=password)
        if user is None:
            return Response({"detail": "Invalid credentials"}, status=status.HTTP_401_UNAUTHORIZED)

        access, refresh = issue_tokens(user)
        response = Response(
            {
                "user": {**UserSerializer(user).data, "is_admin": user.is_staff},
                "token": access,
                "refresh": refresh,
            },
            status=status.HTTP_200_OK,
        )

        lifetime = settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"]
        response.set_cookie(
            key=AUTH_COOKIE_NAME,
            value=access,
            httponly=True,
            secure=settings.AUTH_COOKIE_SECURE,
            samesite="Lax",
            max_age=int(lifetime.total_seconds()),
        )
        return response


class LogoutView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        response = Response({"message": "Logged out"}, status=status.HTTP_200_OK)
        response.delete_cookie(AUTH_COOKIE_NAME)
        return response


class ProfileView(APIView):
    """Authoritative identity for clients; never decode the token client-side."""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(ProfileSerializer(request.user).data)

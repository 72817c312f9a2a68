import logging

from django.apps import apps
from django.db import transaction
from rest_framework import permissions, status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Message
from .serializers import MessageSerializer, PostMessageSerializer

logger = logging.getLogger(__name__)


class MessageListCreateAPIView(APIView):
    """
    GET: chat history, oldest first (public)
    POST: post a message as the caller, body { "content": "...", "recipient_id": <id, optional> }
    """

    def get_permissions(self):
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated()]

    def get(self, request, format=None):
        qs = Message.objects.select_related("user")
        return Response(MessageSerializer(qs, many=True).data)

    def post(self, request, format=None):
        serializer = PostMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        relay = apps.get_app_config("chat").relay
        try:
            message = relay.post_message(request.user, serializer.validated_data["content"])
        except ValueError as exc:
            raise ValidationError({"content": [str(exc)]})

        recipient_id = serializer.validated_data.get("recipient_id")
        transaction.on_commit(lambda: relay.publish_sync(message, recipient_id))
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)

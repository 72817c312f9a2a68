from rest_framework import serializers
from django.contrib.auth import get_user_model

from .models import Message, MAX_MESSAGE_LENGTH

User = get_user_model()


class MessageAuthorSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "email", "name"]


class MessageSerializer(serializers.ModelSerializer):
    user = MessageAuthorSerializer(read_only=True)

    class Meta:
        model = Message
        fields = ["id", "content", "created_at", "user"]
        read_only_fields = fields


class PostMessageSerializer(serializers.Serializer):
    content = serializers.CharField(max_length=MAX_MESSAGE_LENGTH)
    recipient_id = serializers.IntegerField(required=False, allow_null=True)

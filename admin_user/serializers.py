from rest_framework import serializers
from user.models import User


class AdminUserSerializer(serializers.ModelSerializer):
    is_admin = serializers.BooleanField(source="is_staff", read_only=True)
    order_count = serializers.IntegerField(read_only=True)
    message_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "name",
            "is_admin",
            "date_joined",
            "order_count",
            "message_count",
        )
        read_only_fields = fields

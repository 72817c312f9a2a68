# admin_orders/serializers.py
from rest_framework import serializers
from order.models import Order
from order.serializers import OrderItemSerializer
from django.contrib.auth import get_user_model

User = get_user_model()


class UserSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "name", "email"]


class AdminOrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "user",
            "total",
            "status",
            "created_at",
            "updated_at",
            "items",
        ]
        read_only_fields = fields


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)

from decimal import Decimal

from rest_framework import serializers
from .models import Product


class ProductSerializer(serializers.ModelSerializer):
    name = serializers.CharField(max_length=255, allow_blank=False, trim_whitespace=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    stock = serializers.IntegerField(min_value=0)

    class Meta:
        model = Product
        fields = ("id", "name", "description", "price", "stock", "in_stock", "created_at", "updated_at")
        read_only_fields = ("in_stock", "created_at", "updated_at")

    def validate_price(self, value):
        if value <= Decimal("0"):
            raise serializers.ValidationError("Price must be positive")
        return value


class ProductBriefSerializer(serializers.ModelSerializer):
    # minimal product shape for cart lines and order items
    class Meta:
        model = Product
        fields = ("id", "name", "price")

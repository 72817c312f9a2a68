from rest_framework import serializers
from .models import Cart, CartItem, MAX_QUANTITY
from product.serializers import ProductBriefSerializer


class CartItemSerializer(serializers.ModelSerializer):
    product = ProductBriefSerializer(read_only=True)
    # derived from live prices, so no digit cap
    line_total = serializers.DecimalField(max_digits=None, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = ("id", "product", "quantity", "line_total", "added_at")
        read_only_fields = fields


class CartSerializer(serializers.ModelSerializer):
    items = CartItemSerializer(many=True, read_only=True)
    total = serializers.DecimalField(max_digits=None, decimal_places=2, read_only=True)

    class Meta:
        model = Cart
        fields = ("id", "items", "total")
        read_only_fields = fields


class AddToCartSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY, default=1)


class UpdateQuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY)

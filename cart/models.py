from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone
from product.models import Product

User = settings.AUTH_USER_MODEL

MAX_QUANTITY = 1000  # per cart line


class Cart(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="cart")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Cart of {self.user_id}"

    @property
    def total(self):
        # always derived from live prices, never stored
        return sum((item.line_total for item in self.items.all()), Decimal("0.00"))


class CartItem(models.Model):
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="cart_items")
    quantity = models.PositiveIntegerField(default=1)
    added_at = models.DateTimeField(default=timezone.now)

    class Meta:
        unique_together = ("cart", "product")
        ordering = ("added_at", "id")

    def __str__(self):
        return f"{self.cart_id} - {self.product_id} x{self.quantity}"

    @property
    def line_total(self):
        return self.product.price * self.quantity

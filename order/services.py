import logging
from decimal import Decimal

from django.db import transaction
from rest_framework.exceptions import ValidationError

from cart.models import Cart
from ecom_chat.exceptions import EmptyCart
from .models import Order, OrderItem

logger = logging.getLogger(__name__)


def max_order_total():
    field = Order._meta.get_field("total")
    return Decimal(10) ** (field.max_digits - field.decimal_places) - Decimal(10) ** -field.decimal_places


@transaction.atomic
def create_order(user):
    """
    Turn the user's cart into an order and empty the cart in one transaction.

    Prices and product names are copied onto the order items so later catalog
    edits never change what was ordered. Stock is left untouched.
    """
    cart = Cart.objects.select_for_update().filter(user=user).first()
    if cart is None:
        raise EmptyCart()

    lines = list(cart.items.select_related("product"))
    if not lines:
        raise EmptyCart()

    total = sum((line.product.price * line.quantity for line in lines), Decimal("0.00"))
    if total > max_order_total():
        raise ValidationError({"detail": "Order total exceeds the maximum allowed amount."})

    order = Order.objects.create(user=user, total=total)

    OrderItem.objects.bulk_create([
        OrderItem(
            order=order,
            product=line.product,
            product_name=line.product.name,
            quantity=line.quantity,
            price=line.product.price,
        )
        for line in lines
    ])

    cart.items.all().delete()

    logger.info("Order %s created for user %s: %s items, total %s", order.id, user.id, len(lines), total)
    return order


@transaction.atomic
def update_status(order, new_status):
    if new_status not in dict(Order.STATUS_CHOICES):
        raise ValueError(f"Invalid status {new_status!r}")
    order.status = new_status
    order.save(update_fields=["status", "updated_at"])
    return order

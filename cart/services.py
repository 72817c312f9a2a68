import logging

from django.db import transaction
from django.db.models import F
from rest_framework.exceptions import ValidationError

from .models import Cart, CartItem, MAX_QUANTITY

logger = logging.getLogger(__name__)


def get_cart(user):
    """Return the user's cart with lines and products loaded, or None."""
    return (
        Cart.objects.filter(user=user)
        .prefetch_related("items__product")
        .first()
    )


@transaction.atomic
def add_to_cart(user, product, quantity=1):
    """
    Add ``quantity`` of ``product``. The cart is created on first use and an
    existing line is merged by summing quantities.
    Returns (cart, item, created) where ``created`` tells if a new line was inserted.
    Raises ValidationError when the line would exceed MAX_QUANTITY.
    """
    cart, _ = Cart.objects.get_or_create(user=user)
    item, created = CartItem.objects.select_for_update().get_or_create(
        cart=cart, product=product, defaults={"quantity": quantity}
    )
    merged = quantity if created else item.quantity + quantity
    if merged > MAX_QUANTITY:
        raise ValidationError({"quantity": [f"A cart line holds at most {MAX_QUANTITY} units."]})

    if not created:
        CartItem.objects.filter(pk=item.pk).update(quantity=F("quantity") + quantity)
        item.refresh_from_db(fields=["quantity"])

    logger.debug("cart %s: product %s -> qty %s", cart.id, product.id, item.quantity)
    return cart, item, created


def set_quantity(user, product_id, quantity):
    """Overwrite the quantity of an existing line. Returns the number of rows touched."""
    return CartItem.objects.filter(cart__user=user, product_id=product_id).update(quantity=quantity)


def remove_from_cart(user, product_id):
    """Delete the line for ``product_id`` if present; a missing line is not an error."""
    deleted, _ = CartItem.objects.filter(cart__user=user, product_id=product_id).delete()
    return deleted > 0

import logging

from django.apps import apps
from django.db import transaction
from django.db.models.signals import pre_save, post_save
from django.dispatch import receiver

from .models import Order

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=Order)
def order_pre_save(sender, instance, **kwargs):
    if instance.pk:
        instance._old_status = (
            Order.objects.filter(pk=instance.pk).values_list("status", flat=True).first()
        )
    else:
        instance._old_status = None


@receiver(post_save, sender=Order)
def order_post_save(sender, instance, created, **kwargs):
    if created:
        return

    old_status = getattr(instance, "_old_status", None)
    new_status = instance.status

    if old_status == new_status:
        return

    event = {
        "type": "order_status",
        "order_id": instance.id,
        "status": new_status,
        "message": f"Your order #{instance.id} is now {new_status}",
    }
    relay = apps.get_app_config("chat").relay
    user_id = instance.user_id

    # only tell the customer once the change is actually committed
    transaction.on_commit(lambda: relay.notify_user_sync(user_id, event))
    logger.info("Order %s status %s -> %s", instance.id, old_status, new_status)

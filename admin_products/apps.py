from django.apps import AppConfig


class AdminProductsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "admin_products"

"""
URL configuration for the ecom_chat project.

Routes carry no trailing slash so they match the paths the storefront and
admin single-page apps call.
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

from .views import index, health

urlpatterns = [
    path("", index, name="index"),
    path("health", health, name="health"),
    path("django-admin/", admin.site.urls),
    path("auth/", include("user.urls")),
    path("", include("product.urls")),
    path("", include("cart.urls")),
    path("", include("order.urls")),
    path("", include("chat.urls")),
    path("admin/", include("admin_user.urls")),
    path("admin/", include("admin_orders.urls")),
    path("admin/", include("admin_products.urls")),
    path("admin/", include("admin_dashboard.urls")),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),  # OpenAPI JSON/YAML
    path("schema/swagger-ui/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("schema/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
]

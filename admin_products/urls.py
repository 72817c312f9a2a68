# admin_products/urls.py
from django.urls import path
from .views import AdminProductDetail

urlpatterns = [
    path("products/<int:pk>", AdminProductDetail.as_view(), name="admin-products-detail"),
]

from django.urls import path
from .views import orders, order_detail

urlpatterns = [
    path("orders", orders, name="orders"),
    path("orders/<int:order_id>", order_detail, name="order-detail"),
]

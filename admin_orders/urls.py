# admin_orders/urls.py
from django.urls import path
from .views import AdminOrderList, AdminOrderStatus

urlpatterns = [
    path("orders", AdminOrderList.as_view(), name="admin-orders-list"),
    path("orders/<int:pk>/status", AdminOrderStatus.as_view(), name="admin-orders-status"),
]

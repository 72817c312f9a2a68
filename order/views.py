from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .models import Order
from .serializers import OrderSerializer
from . import services


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def orders(request):
    """
    GET  /orders -> list the caller's orders, newest first
    POST /orders -> place an order from the caller's cart
    """
    if request.method == "POST":
        order = services.create_order(request.user)
        order = Order.objects.prefetch_related("items").get(pk=order.pk)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    qs = Order.objects.filter(user=request.user).prefetch_related("items")
    return Response(OrderSerializer(qs, many=True).data)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def order_detail(request, order_id):
    try:
        order = Order.objects.prefetch_related("items").get(id=order_id, user=request.user)
    except Order.DoesNotExist:
        raise NotFound("Order not found")
    return Response(OrderSerializer(order).data)

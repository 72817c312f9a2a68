from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAdminUser
from django.db.models import Q

from order.models import Order
from order import services
from .serializers import AdminOrderSerializer, OrderStatusSerializer


class AdminOrderList(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        """
        GET /admin/orders?search=foo&status=pending
        """
        qs = Order.objects.select_related("user").prefetch_related("items").order_by("-created_at", "-id")

        search = request.query_params.get("search")
        if search:
            # search by user email or name; id only when numeric
            q = Q(user__email__icontains=search) | Q(user__name__icontains=search)
            if search.isdigit():
                q |= Q(id=int(search))
            qs = qs.filter(q)

        status_filter = request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)

        return Response(AdminOrderSerializer(qs, many=True).data)


class AdminOrderStatus(APIView):
    permission_classes = [IsAdminUser]

    def get_object(self, pk):
        try:
            return Order.objects.select_related("user").get(pk=pk)
        except Order.DoesNotExist:
            raise NotFound("Order not found")

    def put(self, request, pk):
        """
        Set only the order status.
        Body: { "status": "processing" }
        """
        order = self.get_object(pk)

        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        services.update_status(order, serializer.validated_data["status"])
        order = Order.objects.select_related("user").prefetch_related("items").get(pk=order.pk)
        return Response(AdminOrderSerializer(order).data, status=status.HTTP_200_OK)

    patch = put

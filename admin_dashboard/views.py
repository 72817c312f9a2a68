from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db.models import Sum
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from product.models import Product
from order.models import Order

User = get_user_model()


@api_view(["GET"])
@permission_classes([IsAdminUser])
def admin_stats(request):
    revenue = Order.objects.aggregate(total=Sum("total"))["total"] or Decimal("0.00")
    return Response({
        "users": User.objects.count(),
        "products": Product.objects.count(),
        "orders": Order.objects.count(),
        "revenue": f"{revenue:.2f}",
    })

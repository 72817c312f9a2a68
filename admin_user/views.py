from django.db.models import Count, Q
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import permissions

from user.models import User
from .serializers import AdminUserSerializer


class UserListAPIView(APIView):
    """
    GET: list users with their order and message counts.
    Query params:
      - search (searches name, email)
      - ordering (one of ALLOWED_ORDERING)
    """
    permission_classes = [permissions.IsAdminUser]

    ALLOWED_ORDERING = {
        "id", "-id",
        "email", "-email",
        "date_joined", "-date_joined",
        "order_count", "-order_count",
    }

    def get(self, request, format=None):
        qs = User.objects.annotate(
            order_count=Count("orders", distinct=True),
            message_count=Count("messages", distinct=True),
        )

        search_q = request.query_params.get("search")
        if search_q:
            qs = qs.filter(Q(name__icontains=search_q) | Q(email__icontains=search_q))

        ordering = request.query_params.get("ordering")
        if ordering not in self.ALLOWED_ORDERING:
            ordering = "-id"
        qs = qs.order_by(ordering)

        return Response(AdminUserSerializer(qs, many=True).data)

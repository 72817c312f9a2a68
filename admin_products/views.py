# admin_products/views.py
import logging

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAdminUser

from product.models import Product
from product.serializers import ProductSerializer

logger = logging.getLogger(__name__)


class AdminProductDetail(APIView):
    permission_classes = [IsAdminUser]

    def get_object(self, pk):
        try:
            return Product.objects.get(pk=pk)
        except Product.DoesNotExist:
            raise NotFound("Product not found")

    def get(self, request, pk):
        return Response(ProductSerializer(self.get_object(pk)).data)

    def put(self, request, pk):
        return self._update(request, pk, partial=False)

    def patch(self, request, pk):
        return self._update(request, pk, partial=True)

    def _update(self, request, pk, partial):
        obj = self.get_object(pk)
        serializer = ProductSerializer(obj, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        product = serializer.save()
        logger.info("Product %s updated by admin %s", product.id, request.user.id)
        return Response(ProductSerializer(product).data)

    def delete(self, request, pk):
        obj = self.get_object(pk)
        obj.delete()
        logger.info("Product %s deleted by admin %s", pk, request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

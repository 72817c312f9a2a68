from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status, permissions
from rest_framework.exceptions import NotFound
from django.shortcuts import get_object_or_404

from product.models import Product
from . import services
from .serializers import CartSerializer, AddToCartSerializer, UpdateQuantitySerializer

EMPTY_CART = {"id": None, "items": [], "total": "0.00"}


def cart_payload(user):
    cart = services.get_cart(user)
    if cart is None:
        return dict(EMPTY_CART)
    return CartSerializer(cart).data


class CartAPIView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, format=None):
        return Response(cart_payload(request.user), status=status.HTTP_200_OK)

    def post(self, request, format=None):
        """
        Expected payload:
        {
            "product_id": <id>,
            "quantity": <int, default 1>
        }
        """
        serializer = AddToCartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        product = get_object_or_404(Product, pk=serializer.validated_data["product_id"])
        _, _, created = services.add_to_cart(
            request.user, product, serializer.validated_data["quantity"]
        )

        return Response(
            cart_payload(request.user),
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class CartItemAPIView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request, product_id, format=None):
        """ Update quantity only. """
        serializer = UpdateQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if not services.set_quantity(request.user, product_id, serializer.validated_data["quantity"]):
            raise NotFound("Item not in cart")
        return Response(cart_payload(request.user), status=status.HTTP_200_OK)

    def delete(self, request, product_id, format=None):
        services.remove_from_cart(request.user, product_id)
        return Response(cart_payload(request.user), status=status.HTTP_200_OK)

import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "conflict"


class EmptyCart(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Cart is empty."
    default_code = "empty_cart"


def api_exception_handler(exc, context):
    """
    DRF handles validation, auth, permission and not-found errors itself.
    Anything it does not recognise is logged and turned into a bare 500 so
    internals never reach the client.
    """
    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view")
    logger.exception("Unhandled error in %s", view.__class__.__name__ if view else "request", exc_info=exc)
    return Response(
        {"detail": "Internal server error"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )

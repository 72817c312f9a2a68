# product/urls.py
from rest_framework.routers import SimpleRouter
from django.urls import path, include
from .views import ProductViewSet

router = SimpleRouter(trailing_slash=False)
router.register(r"products", ProductViewSet, basename="product")

urlpatterns = [
    path("", include(router.urls)),
]

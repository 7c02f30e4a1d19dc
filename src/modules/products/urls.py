"""Catalog routes: ``products/`` with its list and detail actions."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.products.views import ProductViewSet

router = DefaultRouter(trailing_slash=True)
router.include_root_view = False
router.register(r"products", ProductViewSet, basename="product")

urlpatterns = router.urls

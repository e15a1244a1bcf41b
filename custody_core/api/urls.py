# custody_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from custody_core.alerts.api.views import AlertViewSet
from custody_core.audit.api.views import AuditEventViewSet
from custody_core.entities.api.views import EntityViewSet
from custody_core.projections.api.views import InventoryViewSet
from custody_core.registry.api.views import BatchViewSet, MedicineViewSet

router = DefaultRouter()

router.register(r"entities", EntityViewSet, basename="entities")
router.register(r"medicines", MedicineViewSet, basename="medicines")
router.register(r"batches", BatchViewSet, basename="batches")
router.register(r"inventory", InventoryViewSet, basename="inventory")
router.register(r"alerts", AlertViewSet, basename="alerts")
router.register(r"audit/events", AuditEventViewSet, basename="audit-events")

urlpatterns = [
    path("auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]

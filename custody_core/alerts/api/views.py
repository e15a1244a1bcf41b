# custody_core/alerts/api/views.py
from __future__ import annotations

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from custody_core.alerts.api.serializers import AlertSerializer
from custody_core.alerts.models import Alert
from custody_core.alerts.selectors import alerts_qs
from custody_core.alerts.services import AlertService
from custody_core.common.errors import NotFound
from custody_core.entities.auth import caller_address


class AlertViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Alerts addressed to the caller's entity.
    """
    serializer_class = AlertSerializer
    queryset = Alert.objects.none()

    def get_queryset(self):
        qs = alerts_qs(holder_address=caller_address(self.request))
        status_q = self.request.query_params.get("status")
        code_q = self.request.query_params.get("code")
        if status_q:
            qs = qs.filter(status=status_q)
        if code_q:
            qs = qs.filter(code=code_q)
        return qs.order_by("-created_at", "-id")

    @action(methods=["POST"], detail=True, url_path="ack")
    def ack(self, request, pk=None):
        try:
            alert_id = int(pk)
        except (TypeError, ValueError):
            raise NotFound("Alert not found.", alert_id=pk)
        alert = AlertService.ack_alert(holder_address=caller_address(request), alert_id=alert_id)
        return Response(AlertSerializer(alert).data, status=status.HTTP_200_OK)

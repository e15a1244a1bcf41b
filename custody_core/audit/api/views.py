# custody_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from custody_core.audit.api.serializers import AuditEventSerializer
from custody_core.audit.models import AuditEvent
from custody_core.audit.selectors import list_audit_events


class AuditEventViewSet(viewsets.GenericViewSet):
    """
    List registry audit events.
    """
    permission_classes = [IsAuthenticated]

    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditEventSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="entity_type", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="entity_id", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="event_code", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="actor_address", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(
                name="limit",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Max records to return (default 200, max 500).",
            ),
        ],
    )
    def list(self, request):
        qs = list_audit_events(
            entity_type=request.query_params.get("entity_type") or None,
            entity_id=request.query_params.get("entity_id") or None,
            event_code=request.query_params.get("event_code") or None,
            actor_address=request.query_params.get("actor_address") or None,
        )

        limit = request.query_params.get("limit")
        try:
            limit_n = int(limit) if limit else 200
        except ValueError:
            limit_n = 200
        limit_n = max(1, min(limit_n, 500))

        return Response(AuditEventSerializer(qs[:limit_n], many=True).data, status=status.HTTP_200_OK)

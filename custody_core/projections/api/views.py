# custody_core/projections/api/views.py
from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from custody_core.entities.auth import caller_address
from custody_core.projections.selectors import ProjectionSelectors, as_dicts


class InventoryViewSet(viewsets.ViewSet):
    """
    Read-only inventory projections. `pk` is a holder address.
    """
    lookup_value_regex = "[^/]+"

    @action(detail=False, methods=["get"])
    def mine(self, request):
        items = ProjectionSelectors.entity_medicines(holder=caller_address(request))
        return Response(as_dicts(items), status=status.HTTP_200_OK)

    @action(detail=True, methods=["get"])
    def medicines(self, request, pk=None):
        items = ProjectionSelectors.entity_medicines(holder=pk)
        return Response(as_dicts(items), status=status.HTTP_200_OK)

    @action(detail=True, methods=["get"], url_path=r"medicines/(?P<medicine_id>[^/]+)")
    def medicine_balance(self, request, pk=None, medicine_id=None):
        quantity = ProjectionSelectors.inventory_of(holder=pk, medicine_id=medicine_id)
        return Response(
            {"holder": pk, "medicine_id": medicine_id, "quantity": quantity},
            status=status.HTTP_200_OK,
        )

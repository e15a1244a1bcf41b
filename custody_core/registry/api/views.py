# custody_core/registry/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from custody_core.common.api.pagination import paginate
from custody_core.entities.auth import caller_address
from custody_core.ledger.services import InventoryLedger
from custody_core.projections.selectors import ProjectionSelectors, as_dicts
from custody_core.registry.api.serializers import (
    BatchCreateSerializer,
    BatchSerializer,
    DispenseSerializer,
    MedicineCreateSerializer,
    MedicineSerializer,
    SweepSerializer,
    TransferSerializer,
)
from custody_core.registry.models import Batch, Medicine
from custody_core.registry.selectors import RegistrySelectors
from custody_core.registry.services import BatchService, MedicineService
from custody_core.supply_events import selectors as event_selectors
from custody_core.supply_events.api.serializers import AuthenticitySerializer, SupplyChainEventSerializer
from custody_core.supply_events.api.views import filtered_history_response


def _parse_bool(raw: str | None) -> bool | None:
    if raw in ("true", "1"):
        return True
    if raw in ("false", "0"):
        return False
    return None


class MedicineViewSet(viewsets.ViewSet):
    """
    Thin API layer:
    - validation mapping
    - calls selectors for reads
    - calls services for writes
    """
    serializer_class = MedicineSerializer
    queryset = Medicine.objects.none()
    lookup_value_regex = "[^/]+"

    def list(self, request):
        qs = RegistrySelectors.list_medicines(
            manufacturer=request.query_params.get("manufacturer") or None,
            approved=_parse_bool(request.query_params.get("approved")),
        )
        return paginate(request, qs, MedicineSerializer)

    def retrieve(self, request, pk=None):
        medicine = ProjectionSelectors.medicine_details(medicine_id=pk)
        return Response(MedicineSerializer(medicine).data, status=status.HTTP_200_OK)

    @extend_schema(request=MedicineCreateSerializer, responses={201: MedicineSerializer})
    def create(self, request):
        ser = MedicineCreateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        medicine = MedicineService.register_medicine(
            actor=caller_address(request),
            medicine_id=ser.validated_data["id"],
            name=ser.validated_data["name"],
            brand=ser.validated_data["brand"],
        )
        return Response(MedicineSerializer(medicine).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: MedicineSerializer})
    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        medicine = MedicineService.approve_medicine(actor=caller_address(request), medicine_id=pk)
        return Response(MedicineSerializer(medicine).data, status=status.HTTP_200_OK)

    @extend_schema(responses={200: SupplyChainEventSerializer(many=True)})
    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        RegistrySelectors.get_medicine(medicine_id=pk)
        return filtered_history_response(request, event_selectors.history(medicine_id=pk))

    @extend_schema(responses={200: AuthenticitySerializer})
    @action(detail=True, methods=["get"])
    def authenticity(self, request, pk=None):
        authentic = event_selectors.verify_authenticity(medicine_id=pk)
        return Response({"medicine_id": pk, "authentic": authentic}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["get"])
    def holders(self, request, pk=None):
        items = ProjectionSelectors.holders_with_stock(medicine_id=pk)
        return Response(as_dicts(items), status=status.HTTP_200_OK)

    @extend_schema(responses={200: BatchSerializer(many=True)})
    @action(detail=True, methods=["get"])
    def batches(self, request, pk=None):
        RegistrySelectors.get_medicine(medicine_id=pk)
        qs = RegistrySelectors.batches_for_medicine(medicine_id=pk)
        return Response(BatchSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["get"])
    def conservation(self, request, pk=None):
        return Response(ProjectionSelectors.conservation_report(medicine_id=pk), status=status.HTTP_200_OK)


class BatchViewSet(viewsets.ViewSet):
    serializer_class = BatchSerializer
    queryset = Batch.objects.none()
    lookup_value_regex = "[^/]+"

    def retrieve(self, request, pk=None):
        batch = ProjectionSelectors.batch_details(batch_id=pk)
        return Response(BatchSerializer(batch).data, status=status.HTTP_200_OK)

    @extend_schema(request=BatchCreateSerializer, responses={201: BatchSerializer})
    def create(self, request):
        ser = BatchCreateSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        batch = BatchService.create_batch(
            actor=caller_address(request),
            medicine_id=data["medicine_id"],
            batch_id=data["id"],
            quantity=data["quantity"],
            production_date=data["production_date"],
            expiry_date=data["expiry_date"],
        )
        return Response(BatchSerializer(batch).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: BatchSerializer})
    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):
        batch = BatchService.deactivate_batch(actor=caller_address(request), batch_id=pk)
        return Response(BatchSerializer(batch).data, status=status.HTTP_200_OK)

    @extend_schema(request=TransferSerializer, responses={201: SupplyChainEventSerializer})
    @action(detail=True, methods=["post"])
    def transfer(self, request, pk=None):
        ser = TransferSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        event = InventoryLedger.transfer(
            actor=caller_address(request),
            batch_id=pk,
            to_holder=ser.validated_data["to_holder"],
            quantity=ser.validated_data["quantity"],
        )
        return Response(SupplyChainEventSerializer(event).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=DispenseSerializer, responses={201: SupplyChainEventSerializer})
    @action(detail=True, methods=["post"])
    def dispense(self, request, pk=None):
        ser = DispenseSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        event = InventoryLedger.dispense(
            actor=caller_address(request),
            batch_id=pk,
            quantity=ser.validated_data["quantity"],
            patient_id=ser.validated_data["patient_id"],
        )
        return Response(SupplyChainEventSerializer(event).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: SupplyChainEventSerializer(many=True)})
    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        RegistrySelectors.get_batch(batch_id=pk)
        return filtered_history_response(request, event_selectors.batch_history(batch_id=pk))

    @extend_schema(request=SweepSerializer)
    @action(detail=False, methods=["post"], url_path="sweep-expired")
    def sweep_expired(self, request):
        ser = SweepSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)

        deactivated = BatchService.sweep_expired_batches(now=ser.validated_data.get("as_of"))
        return Response({"deactivated": deactivated, "count": len(deactivated)}, status=status.HTTP_200_OK)

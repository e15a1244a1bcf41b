# custody_core/registry/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from custody_core.common.errors import NotFound
from custody_core.registry.models import Batch, Medicine


class RegistrySelectors:
    """
    Read-only queries for medicines and batches.
    No .save(), no state mutation here.
    """

    @staticmethod
    def get_medicine(*, medicine_id: str) -> Medicine:
        medicine = Medicine.objects.select_related("manufacturer").filter(id=medicine_id).first()
        if medicine is None:
            raise NotFound("Medicine not found.", medicine_id=medicine_id)
        return medicine

    @staticmethod
    def get_batch(*, batch_id: str) -> Batch:
        batch = Batch.objects.select_related("medicine").filter(id=batch_id).first()
        if batch is None:
            raise NotFound("Batch not found.", batch_id=batch_id)
        return batch

    @staticmethod
    def list_medicines(*, manufacturer: str | None = None, approved: bool | None = None) -> QuerySet[Medicine]:
        qs = Medicine.objects.select_related("manufacturer")

        if manufacturer:
            qs = qs.filter(manufacturer_id=manufacturer)

        if approved is not None:
            qs = qs.filter(is_approved=approved)

        return qs.order_by("registered_at", "id")

    @staticmethod
    def pending_approvals() -> QuerySet[Medicine]:
        return RegistrySelectors.list_medicines(approved=False)

    @staticmethod
    def batches_for_medicine(*, medicine_id: str) -> QuerySet[Batch]:
        return Batch.objects.filter(medicine_id=medicine_id).order_by("created_at", "id")

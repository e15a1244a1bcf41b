# custody_core/registry/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from custody_core.registry.models import Batch, Medicine


class MedicineCreateSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=128)
    # Length rules are enforced by the service so the error carries the values.
    name = serializers.CharField(max_length=255, allow_blank=True)
    brand = serializers.CharField(max_length=255, allow_blank=True)


class MedicineSerializer(serializers.ModelSerializer):
    manufacturer = serializers.CharField(source="manufacturer_id", read_only=True)
    approved_by = serializers.CharField(source="approved_by_id", read_only=True, allow_null=True)

    class Meta:
        model = Medicine
        fields = [
            "id",
            "name",
            "brand",
            "registered_at",
            "manufacturer",
            "is_approved",
            "approved_at",
            "approved_by",
        ]
        read_only_fields = fields


class BatchCreateSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=128)
    medicine_id = serializers.CharField(max_length=128)
    quantity = serializers.IntegerField()
    production_date = serializers.DateTimeField()
    expiry_date = serializers.DateTimeField()


class BatchSerializer(serializers.ModelSerializer):
    medicine_id = serializers.CharField(read_only=True)

    class Meta:
        model = Batch
        fields = [
            "id",
            "medicine_id",
            "quantity",
            "remaining_quantity",
            "production_date",
            "expiry_date",
            "is_active",
            "deactivated_at",
            "deactivation_reason",
            "created_at",
        ]
        read_only_fields = fields


class TransferSerializer(serializers.Serializer):
    to_holder = serializers.CharField(max_length=128)
    quantity = serializers.IntegerField()


class DispenseSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()
    patient_id = serializers.CharField(max_length=128, allow_blank=True)


class SweepSerializer(serializers.Serializer):
    as_of = serializers.DateTimeField(required=False, allow_null=True, default=None)

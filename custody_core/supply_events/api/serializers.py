# custody_core/supply_events/api/serializers.py
from rest_framework import serializers

from custody_core.supply_events.models import SupplyChainEvent


class SupplyChainEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = SupplyChainEvent
        fields = [
            "id",
            "medicine_id",
            "batch_id",
            "event_type",
            "from_entity",
            "to_entity",
            "quantity",
            "timestamp",
            "patient_id",
        ]
        read_only_fields = fields


class AuthenticitySerializer(serializers.Serializer):
    medicine_id = serializers.CharField()
    authentic = serializers.BooleanField()

# custody_core/audit/api/serializers.py
from rest_framework import serializers

from custody_core.audit.models import AuditEvent


class AuditEventSerializer(serializers.ModelSerializer):
    # Keep API field name "timestamp", mapped to the model's occurred_at
    timestamp = serializers.DateTimeField(source="occurred_at", read_only=True)

    class Meta:
        model = AuditEvent
        fields = [
            "id",
            "entity_type",
            "entity_id",
            "event_code",
            "actor_address",
            "timestamp",
            "metadata",
        ]
        read_only_fields = fields

from rest_framework import serializers

from custody_core.alerts.models import Alert


class AlertSerializer(serializers.ModelSerializer):
    class Meta:
        model = Alert
        fields = [
            "id",
            "code",
            "title",
            "message",
            "severity",
            "status",
            "holder_address",
            "medicine_id",
            "batch_id",
            "acked_at",
            "created_at",
            "meta",
        ]
        read_only_fields = fields

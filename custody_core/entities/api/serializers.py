# custody_core/entities/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from custody_core.entities.models import Entity, Role


class EntityRegisterSerializer(serializers.Serializer):
    address = serializers.CharField(max_length=128)
    name = serializers.CharField(max_length=255)
    role = serializers.ChoiceField(choices=[r for r in Role.values if r != Role.NONE])
    location = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    license_info = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    user_id = serializers.IntegerField(required=False, allow_null=True, default=None)


class EntitySerializer(serializers.ModelSerializer):
    class Meta:
        model = Entity
        fields = [
            "address",
            "name",
            "location",
            "license_info",
            "role",
            "is_active",
            "registered_at",
        ]
        read_only_fields = fields

# custody_core/entities/api/views.py
from __future__ import annotations

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response

from custody_core.common.errors import NotFound
from custody_core.entities.api.serializers import EntityRegisterSerializer, EntitySerializer
from custody_core.entities.auth import caller_address
from custody_core.entities.models import Entity
from custody_core.entities.services import EntityService


class EntityViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Directory reads for any authenticated caller; writes are staff-only.
    """
    serializer_class = EntitySerializer
    queryset = Entity.objects.all().order_by("registered_at", "address")
    filterset_fields = ["role", "is_active"]
    lookup_value_regex = "[^/]+"

    def get_permissions(self):
        if self.action in {"create", "activate", "deactivate"}:
            return [IsAdminUser()]
        return [IsAuthenticated()]

    def get_object(self):
        try:
            return Entity.objects.get(address=self.kwargs["pk"])
        except Entity.DoesNotExist:
            raise NotFound("Entity is not registered.", address=self.kwargs["pk"])

    @extend_schema(request=EntityRegisterSerializer, responses={201: EntitySerializer})
    def create(self, request):
        ser = EntityRegisterSerializer(data=request.data or {})
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        user = None
        if data.get("user_id") is not None:
            user = get_user_model().objects.filter(id=data["user_id"]).first()
            if user is None:
                raise DRFValidationError({"user_id": "Unknown user."})

        entity = EntityService.register(
            address=data["address"],
            name=data["name"],
            role=data["role"],
            location=data.get("location", ""),
            license_info=data.get("license_info", ""),
            user=user,
        )
        return Response(EntitySerializer(entity).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def activate(self, request, pk=None):
        entity = EntityService.activate(address=pk)
        return Response(EntitySerializer(entity).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):
        entity = EntityService.deactivate(address=pk)
        return Response(EntitySerializer(entity).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"])
    def me(self, request):
        entity = Entity.objects.get(address=caller_address(request))
        return Response(EntitySerializer(entity).data, status=status.HTTP_200_OK)

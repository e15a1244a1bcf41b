# custody_core/entities/services.py
from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction

from custody_core.common.errors import AlreadyExists, InvalidInput, NotFound
from custody_core.entities.models import Entity, Role

logger = logging.getLogger(__name__)


class EntityService:
    """
    Minimal directory write-side so the ledger can run end to end.
    Identity issuance itself lives outside this service.
    """

    @staticmethod
    def _get_for_update(address: str) -> Entity:
        try:
            return Entity.objects.select_for_update().get(address=address)
        except Entity.DoesNotExist:
            raise NotFound("Entity is not registered.", address=address)

    @staticmethod
    @transaction.atomic
    def register(
        *,
        address: str,
        name: str,
        role: str,
        location: str = "",
        license_info: str = "",
        user=None,
        is_active: bool = True,
    ) -> Entity:
        address = (address or "").strip()
        name = (name or "").strip()
        min_len = getattr(settings, "CUSTODY_MIN_NAME_LENGTH", 2)

        if not address:
            raise InvalidInput("Address is required.", field="address")
        if len(name) < min_len:
            raise InvalidInput("Name is too short.", field="name", value=name, min_length=min_len)
        if role not in Role.values or role == Role.NONE:
            raise InvalidInput("Role must be one of the participant roles.", field="role", value=role)
        if Entity.objects.filter(address=address).exists():
            raise AlreadyExists("Entity is already registered.", address=address)

        entity = Entity.objects.create(
            address=address,
            name=name,
            role=role,
            location=location or "",
            license_info=license_info or "",
            user=user,
            is_active=is_active,
        )
        logger.info("entity registered address=%s role=%s", entity.address, entity.role)
        return entity

    @staticmethod
    @transaction.atomic
    def activate(*, address: str) -> Entity:
        entity = EntityService._get_for_update(address)
        if not entity.is_active:
            entity.is_active = True
            entity.save(update_fields=["is_active", "updated_at"])
            logger.info("entity activated address=%s", address)
        return entity

    @staticmethod
    @transaction.atomic
    def deactivate(*, address: str) -> Entity:
        entity = EntityService._get_for_update(address)
        if entity.is_active:
            entity.is_active = False
            entity.save(update_fields=["is_active", "updated_at"])
            logger.info("entity deactivated address=%s", address)
        return entity

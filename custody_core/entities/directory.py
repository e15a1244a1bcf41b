# custody_core/entities/directory.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from custody_core.common.errors import NotFound, Unauthorized
from custody_core.entities.models import Entity, Role


@dataclass(frozen=True)
class EntityDetails:
    address: str
    name: str
    location: str
    license_info: str
    role: str
    active: bool
    registered_at: datetime


def get_entity(address: str) -> Entity | None:
    if not address:
        return None
    return Entity.objects.filter(address=address).first()


def is_active(address: str) -> bool:
    entity = get_entity(address)
    return bool(entity and entity.is_active)


def role_of(address: str) -> Role:
    entity = get_entity(address)
    if entity is None:
        return Role.NONE
    return Role(entity.role)


def details(address: str) -> EntityDetails:
    entity = get_entity(address)
    if entity is None:
        raise NotFound("Entity is not registered.", address=address)
    return EntityDetails(
        address=entity.address,
        name=entity.name,
        location=entity.location,
        license_info=entity.license_info,
        role=entity.role,
        active=entity.is_active,
        registered_at=entity.registered_at,
    )


def require_active_role(address: str, *roles: str) -> Entity:
    """
    Return the caller's Entity if it is registered, active and (when roles are
    given) holds one of them. Raises Unauthorized otherwise.
    """
    entity = get_entity(address)
    if entity is None or not entity.is_active:
        raise Unauthorized("Caller is not a registered, active entity.", address=address)
    if roles and entity.role not in roles:
        raise Unauthorized(
            "Caller does not hold the required role.",
            address=address,
            role=entity.role,
            required=list(roles),
        )
    return entity

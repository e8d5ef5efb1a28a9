"""
Domain entities for livestock records.

The entity dataclass itself is generated from the contract schema; this
module adds the herd-status lifecycle and the mapping between entities,
wire DTOs and plain dictionaries.
"""

import uuid
from dataclasses import asdict, replace
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping

from livestock_contracts import FieldKind
from livestock_contracts.livestock import (
    LIVESTOCK_CONTRACTS,
    LIVESTOCK_SCHEMA,
    LIVESTOCK_STATUSES,
    LivestockRead,
)
from pydantic import BaseModel

Livestock = LIVESTOCK_CONTRACTS.entity

KEY_FIELDS: FrozenSet[str] = frozenset(
    {LIVESTOCK_SCHEMA.key}
    | {
        spec.name
        for spec in LIVESTOCK_SCHEMA.fields
        if spec.type in (FieldKind.UUID, FieldKind.REF)
    }
)


# Lifecycle states of an animal in the herd, as declared by the schema.
HerdStatus = Enum(
    "HerdStatus",
    {status.upper(): status for status in LIVESTOCK_STATUSES},
    type=str,
)


ALLOWED_TRANSITIONS: Dict[HerdStatus, FrozenSet[HerdStatus]] = {
    HerdStatus.ACTIVE: frozenset({HerdStatus.SOLD, HerdStatus.DECEASED}),
    HerdStatus.SOLD: frozenset(),
    HerdStatus.DECEASED: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    """
    Check whether a status change is allowed.

    Staying in the same status is always allowed so repeated updates
    remain idempotent.
    """
    if current == target:
        return True
    return HerdStatus(target) in ALLOWED_TRANSITIONS[HerdStatus(current)]


def _key_to_str(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


def normalize_values(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert UUID-typed key and reference values to their stored string form."""
    return {
        name: _key_to_str(value) if name in KEY_FIELDS else value
        for name, value in values.items()
    }


def entity_from_row(row: Any) -> "Livestock":
    """Map an ORM row (or any attribute holder) to the domain entity."""
    names = (LIVESTOCK_SCHEMA.key, "created_at", "updated_at", *LIVESTOCK_SCHEMA.field_names)
    return Livestock(**{name: getattr(row, name) for name in names})


def entity_from_dto(dto: BaseModel) -> "Livestock":
    """Map a read DTO back to the domain entity."""
    return Livestock(**normalize_values(dto.model_dump()))


def to_dto(entity: "Livestock") -> BaseModel:
    """Map the domain entity to its read DTO."""
    return LivestockRead.model_validate(entity)


def to_dict(entity: "Livestock") -> Dict[str, Any]:
    """Plain dictionary view of an entity."""
    return asdict(entity)


def with_changes(entity: "Livestock", changes: Mapping[str, Any]) -> "Livestock":
    """Return a copy of the entity with the given field values applied."""
    return replace(entity, **normalize_values(changes))


def changed_fields(entity: "Livestock", values: Mapping[str, Any]) -> Dict[str, Any]:
    """Subset of ``values`` that differs from the entity's current state."""
    current = to_dict(entity)
    return {
        name: value
        for name, value in normalize_values(values).items()
        if current.get(name) != value
    }

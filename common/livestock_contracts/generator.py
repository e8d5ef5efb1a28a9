"""
Contract model generation.

Turns an EntitySchema into the pydantic models both the backend and the
frontend work with. Models are generated, never written by hand, so the
two sides cannot drift apart.
"""

import uuid
from dataclasses import dataclass, field, make_dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional, Tuple, Type

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    conint,
    condecimal,
    conlist,
    constr,
    create_model,
)

from .schema import EntitySchema, FieldKind, FieldSpec

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200
MAX_BATCH_SIZE = 100

PYTHON_TYPES: Dict[FieldKind, type] = {
    FieldKind.STRING: str,
    FieldKind.TEXT: str,
    FieldKind.INTEGER: int,
    FieldKind.DECIMAL: Decimal,
    FieldKind.BOOLEAN: bool,
    FieldKind.DATE: date,
    FieldKind.DATETIME: datetime,
    FieldKind.UUID: uuid.UUID,
    FieldKind.REF: uuid.UUID,
}


class WriteContract(BaseModel):
    """Base for inbound payloads: unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")


class ReadContract(BaseModel):
    """Base for outbound shapes: buildable from ORM rows and domain entities."""

    model_config = ConfigDict(extra="ignore", from_attributes=True)


class QueryContract(BaseModel):
    """Base for list query parameters."""

    model_config = ConfigDict(extra="forbid")


@dataclass(frozen=True)
class ColumnSpec:
    """Persisted-column view of one schema field."""

    name: str
    kind: FieldKind
    nullable: bool
    unique: bool
    indexed: bool
    max_length: Optional[int]
    max_digits: Optional[int]
    decimal_places: Optional[int]
    choices: Optional[Tuple[str, ...]]
    references: Optional[str]
    default: Any


@dataclass(frozen=True)
class ContractSet:
    """All models generated from one EntitySchema."""

    schema: EntitySchema
    create: Type[BaseModel]
    replace: Type[BaseModel]
    patch: Type[BaseModel]
    read: Type[BaseModel]
    filter: Type[BaseModel]
    page: Type[BaseModel]
    batch: Type[BaseModel]
    entity: type

    def models(self) -> Dict[str, Type[BaseModel]]:
        return {
            model.__name__: model
            for model in (
                self.create,
                self.replace,
                self.patch,
                self.read,
                self.filter,
                self.page,
                self.batch,
            )
        }


def field_annotation(spec: FieldSpec) -> Any:
    """Constrained python type for a single field, without optionality."""
    if spec.type == FieldKind.ENUM:
        return Literal[spec.choices]

    if spec.type in (FieldKind.STRING, FieldKind.TEXT):
        if spec.min_length is None and spec.max_length is None and spec.pattern is None:
            return str
        return constr(
            min_length=spec.min_length,
            max_length=spec.max_length,
            pattern=spec.pattern,
        )

    if spec.type == FieldKind.INTEGER and (spec.ge is not None or spec.le is not None):
        return conint(
            ge=int(spec.ge) if spec.ge is not None else None,
            le=int(spec.le) if spec.le is not None else None,
        )

    if spec.type == FieldKind.DECIMAL and any(
        bound is not None
        for bound in (spec.ge, spec.le, spec.max_digits, spec.decimal_places)
    ):
        return condecimal(
            ge=Decimal(str(spec.ge)) if spec.ge is not None else None,
            le=Decimal(str(spec.le)) if spec.le is not None else None,
            max_digits=spec.max_digits,
            decimal_places=spec.decimal_places,
        )

    return PYTHON_TYPES[spec.type]


def _write_fields(schema: EntitySchema) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    for spec in schema.fields:
        annotation = field_annotation(spec)
        if spec.required:
            fields[spec.name] = (annotation, Field(..., description=spec.description))
        elif spec.nullable:
            fields[spec.name] = (
                Optional[annotation],
                Field(None, description=spec.description),
            )
        else:
            fields[spec.name] = (
                annotation,
                Field(spec.default, description=spec.description),
            )
    return fields


def _patch_fields(schema: EntitySchema) -> Dict[str, Any]:
    # Non-nullable fields keep their bare type so an explicit null is rejected;
    # an omitted field stays unset and is left untouched.
    fields: Dict[str, Any] = {}
    for spec in schema.fields:
        annotation = field_annotation(spec)
        if spec.nullable:
            annotation = Optional[annotation]
        fields[spec.name] = (annotation, Field(None, description=spec.description))
    return fields


def _read_fields(schema: EntitySchema) -> Dict[str, Any]:
    fields: Dict[str, Any] = {schema.key: (uuid.UUID, Field(...))}
    for spec in schema.fields:
        annotation = field_annotation(spec)
        if spec.required:
            fields[spec.name] = (annotation, Field(..., description=spec.description))
        else:
            fields[spec.name] = (
                Optional[annotation],
                Field(spec.default, description=spec.description),
            )
    fields["created_at"] = (datetime, Field(...))
    fields["updated_at"] = (datetime, Field(...))
    return fields


def _filter_fields(schema: EntitySchema) -> Dict[str, Any]:
    fields: Dict[str, Any] = {
        spec.name: (Optional[field_annotation(spec)], None)
        for spec in schema.filterable_fields
    }
    fields["limit"] = (conint(ge=1, le=MAX_PAGE_SIZE), DEFAULT_PAGE_SIZE)
    fields["offset"] = (conint(ge=0), 0)
    return fields


def entity_class(schema: EntitySchema) -> type:
    """
    Build the domain entity dataclass for a schema.

    The key and ref fields hold string keys; the audit timestamps are
    always present.
    """
    return make_dataclass(
        schema.entity,
        [
            (schema.key, str),
            ("created_at", datetime),
            ("updated_at", datetime),
            *[
                (spec.name, Any, field(default=spec.default))
                for spec in schema.fields
            ],
        ],
        frozen=True,
    )


def generate_contracts(schema: EntitySchema) -> ContractSet:
    """
    Generate the full model set for an entity.

    Args:
        schema: Parsed entity schema

    Returns:
        ContractSet with create/replace/patch/read/filter/page/batch models
        and the domain entity dataclass
    """
    entity = schema.entity
    doc = schema.description or entity

    create = create_model(
        f"{entity}Create", __base__=WriteContract, __doc__=doc, **_write_fields(schema)
    )
    replace = create_model(
        f"{entity}Replace", __base__=WriteContract, __doc__=doc, **_write_fields(schema)
    )
    patch = create_model(
        f"{entity}Patch", __base__=WriteContract, __doc__=doc, **_patch_fields(schema)
    )
    read = create_model(
        f"{entity}Read", __base__=ReadContract, __doc__=doc, **_read_fields(schema)
    )
    query = create_model(
        f"{entity}Filter", __base__=QueryContract, **_filter_fields(schema)
    )
    page = create_model(
        f"{entity}Page",
        __base__=ReadContract,
        items=(List[read], Field(default_factory=list)),
        total=(int, Field(..., ge=0)),
        limit=(int, Field(..., ge=1)),
        offset=(int, Field(..., ge=0)),
    )
    batch = create_model(
        f"{entity}BatchCreate",
        __base__=WriteContract,
        items=(conlist(create, min_length=1, max_length=MAX_BATCH_SIZE), ...),
    )

    return ContractSet(
        schema=schema,
        create=create,
        replace=replace,
        patch=patch,
        read=read,
        filter=query,
        page=page,
        batch=batch,
        entity=entity_class(schema),
    )


def column_specs(schema: EntitySchema) -> List[ColumnSpec]:
    """Describe the persisted columns for every schema field."""
    return [
        ColumnSpec(
            name=spec.name,
            kind=spec.type,
            nullable=spec.nullable,
            unique=spec.unique,
            indexed=spec.filterable or spec.unique or spec.type == FieldKind.REF,
            max_length=spec.max_length,
            max_digits=spec.max_digits,
            decimal_places=spec.decimal_places,
            choices=spec.choices,
            references=spec.references,
            default=spec.default,
        )
        for spec in schema.fields
    ]

"""
Database models for livestock service.

The ``livestock`` table is derived from the shared contract schema: one
column per schema field, plus the stable key and audit timestamps.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable

from livestock_contracts import ColumnSpec, FieldKind
from livestock_contracts.livestock import LIVESTOCK_COLUMNS, LIVESTOCK_SCHEMA
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base: Any = declarative_base()

KEY_LENGTH = 36
DEFAULT_STRING_LENGTH = 255
DEFAULT_PRECISION = 12
DEFAULT_SCALE = 2


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_key() -> str:
    return str(uuid.uuid4())


def _column_type(spec: ColumnSpec) -> Any:
    if spec.kind == FieldKind.STRING:
        return String(spec.max_length or DEFAULT_STRING_LENGTH)
    if spec.kind == FieldKind.TEXT:
        return Text()
    if spec.kind == FieldKind.INTEGER:
        return Integer()
    if spec.kind == FieldKind.DECIMAL:
        return Numeric(
            spec.max_digits or DEFAULT_PRECISION,
            DEFAULT_SCALE if spec.decimal_places is None else spec.decimal_places,
        )
    if spec.kind == FieldKind.BOOLEAN:
        return Boolean()
    if spec.kind == FieldKind.DATE:
        return Date()
    if spec.kind == FieldKind.DATETIME:
        return DateTime()
    if spec.kind in (FieldKind.UUID, FieldKind.REF):
        return String(KEY_LENGTH)
    if spec.kind == FieldKind.ENUM:
        return String(max(len(choice) for choice in spec.choices or ("",)))
    raise ValueError(f"Unsupported column kind: {spec.kind}")


def schema_columns(columns: Iterable[ColumnSpec], table: str) -> Dict[str, Column]:
    """
    Build SQLAlchemy columns from contract column specs.

    Args:
        columns: Column specs derived from the entity schema
        table: Table name, used for self-referencing foreign keys

    Returns:
        Mapping of attribute name to Column
    """
    result: Dict[str, Column] = {}
    for spec in columns:
        args: list = [_column_type(spec)]
        if spec.kind == FieldKind.REF and spec.references == LIVESTOCK_SCHEMA.entity:
            args.append(ForeignKey(f"{table}.id", ondelete="SET NULL"))
        result[spec.name] = Column(
            *args,
            nullable=spec.nullable,
            unique=spec.unique or None,
            index=spec.indexed and not spec.unique,
            default=spec.default,
        )
    return result


LivestockRecord: Any = type(
    "LivestockRecord",
    (Base,),
    {
        "__tablename__": LIVESTOCK_SCHEMA.table,
        "__doc__": "Persisted livestock row; columns mirror the contract schema.",
        "id": Column(String(KEY_LENGTH), primary_key=True, default=new_key),
        "created_at": Column(DateTime, default=utcnow, nullable=False),
        "updated_at": Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False),
        **schema_columns(LIVESTOCK_COLUMNS, LIVESTOCK_SCHEMA.table),
    },
)

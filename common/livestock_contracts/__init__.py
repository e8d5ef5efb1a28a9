"""
Shared data contracts.

Entity schemas live in ``schemas/*.json``; every type that crosses the
frontend/backend boundary is generated from them.
"""

from .generator import ColumnSpec, ContractSet, column_specs, generate_contracts
from .schema import (
    EntitySchema,
    FieldKind,
    FieldSpec,
    SchemaDefinitionError,
    load_schema,
    schema_from_dict,
)

__all__ = [
    "ColumnSpec",
    "ContractSet",
    "EntitySchema",
    "FieldKind",
    "FieldSpec",
    "SchemaDefinitionError",
    "column_specs",
    "generate_contracts",
    "load_schema",
    "schema_from_dict",
]

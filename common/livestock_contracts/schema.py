"""
Contract schema model.

Parses the declarative per-entity schema documents shipped in ``schemas/``
into immutable pydantic models. The parsed schema is the only source the
request DTOs, the view models and the persisted column layout derive from.
"""

import hashlib
import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

SCHEMA_DIR = Path(__file__).parent / "schemas"


class SchemaDefinitionError(Exception):
    """Raised when a schema document cannot be loaded or is inconsistent."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid contract schema '{source}': {reason}")


class FieldKind(str, Enum):
    """Semantic field types understood by the generator."""

    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    UUID = "uuid"
    ENUM = "enum"
    REF = "ref"


class FieldSpec(BaseModel):
    """
    Description of one entity field.

    Attributes:
        name: Field name, used verbatim on the wire and as column name
        type: Semantic type
        required: Must be present (and non-null) on create/replace
        default: Value applied when an optional field is omitted
        min_length / max_length / pattern: String constraints
        ge / le: Numeric bounds
        max_digits / decimal_places: Decimal precision and scale, shared by
            validation and the persisted column
        choices: Allowed values for enum fields
        references: Target entity for ref fields
        filterable: Exposed as an equality filter on list queries
        unique: Backed by a unique constraint
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    type: FieldKind
    required: bool = False
    default: Any = None
    description: Optional[str] = None
    min_length: Optional[int] = Field(None, ge=0)
    max_length: Optional[int] = Field(None, ge=1)
    pattern: Optional[str] = None
    ge: Optional[float] = None
    le: Optional[float] = None
    max_digits: Optional[int] = Field(None, ge=1)
    decimal_places: Optional[int] = Field(None, ge=0)
    choices: Optional[Tuple[str, ...]] = None
    references: Optional[str] = None
    filterable: bool = False
    unique: bool = False

    @model_validator(mode="after")
    def check_consistency(self) -> "FieldSpec":
        if self.type == FieldKind.ENUM and not self.choices:
            raise ValueError(f"enum field '{self.name}' declares no choices")
        if self.type != FieldKind.ENUM and self.choices:
            raise ValueError(f"field '{self.name}' declares choices but is not an enum")
        if self.type == FieldKind.REF and not self.references:
            raise ValueError(f"ref field '{self.name}' declares no target entity")
        if self.required and self.default is not None:
            raise ValueError(f"required field '{self.name}' cannot declare a default")
        if (
            self.type == FieldKind.ENUM
            and self.default is not None
            and self.default not in self.choices
        ):
            raise ValueError(
                f"default '{self.default}' of '{self.name}' is not one of its choices"
            )
        if (
            self.min_length is not None
            and self.max_length is not None
            and self.min_length > self.max_length
        ):
            raise ValueError(f"field '{self.name}' has min_length > max_length")
        if self.type != FieldKind.DECIMAL and (
            self.max_digits is not None or self.decimal_places is not None
        ):
            raise ValueError(f"field '{self.name}' declares precision but is not a decimal")
        if (
            self.max_digits is not None
            and self.decimal_places is not None
            and self.decimal_places > self.max_digits
        ):
            raise ValueError(f"field '{self.name}' has decimal_places > max_digits")
        return self

    @property
    def nullable(self) -> bool:
        """Optional fields without a default may hold null."""
        return not self.required and self.default is None


class EntitySchema(BaseModel):
    """Canonical shape of one domain entity."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    entity: str = Field(..., pattern=r"^[A-Z][A-Za-z0-9]*$")
    table: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    version: int = Field(..., ge=1)
    key: str = "id"
    description: Optional[str] = None
    fields: Tuple[FieldSpec, ...]
    fingerprint: str = ""

    @model_validator(mode="before")
    @classmethod
    def name_fields(cls, data: Any) -> Any:
        """Accept ``fields`` as a name -> spec mapping, as written on disk."""
        if isinstance(data, dict) and isinstance(data.get("fields"), dict):
            data = dict(data)
            data["fields"] = [
                {"name": name, **spec} for name, spec in data["fields"].items()
            ]
        return data

    @model_validator(mode="after")
    def check_fields(self) -> "EntitySchema":
        names = [spec.name for spec in self.fields]
        if not names:
            raise ValueError("schema declares no fields")
        if len(set(names)) != len(names):
            raise ValueError("duplicate field names")
        reserved = {self.key, "created_at", "updated_at"}
        clashing = reserved.intersection(names)
        if clashing:
            raise ValueError(f"reserved field names used: {sorted(clashing)}")
        return self

    @property
    def required_fields(self) -> Tuple[FieldSpec, ...]:
        return tuple(spec for spec in self.fields if spec.required)

    @property
    def filterable_fields(self) -> Tuple[FieldSpec, ...]:
        return tuple(spec for spec in self.fields if spec.filterable)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.fields)

    def field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(name)


def fingerprint_document(document: Dict[str, Any]) -> str:
    """Stable sha256 of a schema document, independent of whitespace and key order."""
    canonical = json.dumps(document, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def schema_from_dict(document: Dict[str, Any], source: str = "<memory>") -> EntitySchema:
    """
    Build an EntitySchema from an already parsed document.

    Raises:
        SchemaDefinitionError: If the document is inconsistent
    """
    try:
        return EntitySchema.model_validate(
            {**document, "fingerprint": fingerprint_document(document)}
        )
    except ValidationError as e:
        raise SchemaDefinitionError(source, str(e)) from e


def load_schema(name_or_path: Union[str, Path]) -> EntitySchema:
    """
    Load a schema by entity file name (``"livestock"``) or explicit path.

    Raises:
        SchemaDefinitionError: If the file is missing, malformed or inconsistent
    """
    path = Path(name_or_path)
    if path.suffix != ".json":
        path = SCHEMA_DIR / f"{name_or_path}.json"

    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise SchemaDefinitionError(str(path), "file not found") from e
    except json.JSONDecodeError as e:
        raise SchemaDefinitionError(str(path), f"malformed JSON: {e}") from e

    if not isinstance(document, dict):
        raise SchemaDefinitionError(str(path), "top level must be an object")

    return schema_from_dict(document, source=str(path))

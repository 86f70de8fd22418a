"""Schema description produced by inference.

Every model renders to the published package-schema shape with
``to_schema()``; field names follow Python conventions, the rendered keys
follow the schema document (``additionalProperties``, ``replaceOnChanges``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Annotated, Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from provinfer.errors import InferenceError, SchemaInferenceErrorGroup
from provinfer.token import ANY_REF, ExternalLocator, Token


class PrimitiveKind(StrEnum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    NUMBER = "number"
    STRING = "string"


# =============================================================================
# Type specs
# =============================================================================


class _Spec(BaseModel):
    model_config = ConfigDict(frozen=True)


class PrimitiveType(_Spec):
    kind: Literal["primitive"] = "primitive"
    primitive: PrimitiveKind
    plain: bool = False

    def to_schema(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.primitive.value}
        if self.plain:
            out["plain"] = True
        return out


class ArrayType(_Spec):
    kind: Literal["array"] = "array"
    items: TypeSpec
    plain: bool = False

    def to_schema(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": "array", "items": self.items.to_schema()}
        if self.plain:
            out["plain"] = True
        return out


class MapType(_Spec):
    kind: Literal["map"] = "map"
    additional_properties: TypeSpec
    plain: bool = False

    def to_schema(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "type": "object",
            "additionalProperties": self.additional_properties.to_schema(),
        }
        if self.plain:
            out["plain"] = True
        return out


class RefType(_Spec):
    """Reference to an object type in the ``types`` section."""

    kind: Literal["ref"] = "ref"
    token: Token

    def to_schema(self) -> dict[str, Any]:
        return {"$ref": self.token.type_ref}


class EnumRefType(_Spec):
    kind: Literal["enum"] = "enum"
    token: Token

    def to_schema(self) -> dict[str, Any]:
        return {"$ref": self.token.type_ref}


class ResourceRefType(_Spec):
    """Reference to a resource, either in this package or an external one."""

    kind: Literal["resource"] = "resource"
    token: Token | None = None
    locator: ExternalLocator | None = None

    @model_validator(mode="after")
    def _one_target(self) -> ResourceRefType:
        if (self.token is None) == (self.locator is None):
            raise ValueError("exactly one of token and locator must be set")
        return self

    @property
    def ref(self) -> str:
        if self.locator is not None:
            return self.locator.resource_ref
        return self.token.resource_ref

    def to_schema(self) -> dict[str, Any]:
        return {"$ref": self.ref}


class AnyType(_Spec):
    kind: Literal["any"] = "any"

    def to_schema(self) -> dict[str, Any]:
        return {"$ref": ANY_REF}


TypeSpec = Annotated[
    PrimitiveType | ArrayType | MapType | RefType | EnumRefType | ResourceRefType | AnyType,
    Field(discriminator="kind"),
]

ArrayType.model_rebuild()
MapType.model_rebuild()


# =============================================================================
# Properties and types
# =============================================================================


class PropertySpec(BaseModel):
    """One published property."""

    name: str
    type: TypeSpec
    required: bool = False
    secret: bool = False
    replace_on_changes: bool = False
    description: str | None = None
    default: Any = None
    default_envs: list[str] = Field(default_factory=list)

    def to_schema(self) -> dict[str, Any]:
        out = self.type.to_schema()
        if self.description:
            out["description"] = self.description
        if self.default is not None:
            out["default"] = self.default
        if self.default_envs:
            out["defaultInfo"] = {"environment": list(self.default_envs)}
        if self.secret:
            out["secret"] = True
        if self.replace_on_changes:
            out["replaceOnChanges"] = True
        return out


def _properties(props: dict[str, PropertySpec]) -> dict[str, Any]:
    return {name: prop.to_schema() for name, prop in props.items()}


class ObjectTypeSpec(BaseModel):
    description: str | None = None
    properties: dict[str, PropertySpec] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)

    def to_schema(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": "object", "properties": _properties(self.properties)}
        if self.required:
            out["required"] = list(self.required)
        if self.description:
            out["description"] = self.description
        return out


class EnumValueSpec(BaseModel):
    name: str
    value: Any
    description: str | None = None

    def to_schema(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "value": self.value}
        if self.description:
            out["description"] = self.description
        return out


class EnumTypeSpec(BaseModel):
    type: PrimitiveKind
    values: list[EnumValueSpec]
    description: str | None = None

    def to_schema(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "type": self.type.value,
            "enum": [v.to_schema() for v in self.values],
        }
        if self.description:
            out["description"] = self.description
        return out


# =============================================================================
# Resources, functions and the package
# =============================================================================


class ResourceSchema(BaseModel):
    """Schema of a resource or component: its state and its inputs."""

    description: str | None = None
    output_properties: dict[str, PropertySpec] = Field(default_factory=dict)
    required_outputs: list[str] = Field(default_factory=list)
    input_properties: dict[str, PropertySpec] = Field(default_factory=dict)
    required_inputs: list[str] = Field(default_factory=list)
    is_component: bool = False

    def to_schema(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.description:
            out["description"] = self.description
        out["properties"] = _properties(self.output_properties)
        if self.required_outputs:
            out["required"] = list(self.required_outputs)
        out["inputProperties"] = _properties(self.input_properties)
        if self.required_inputs:
            out["requiredInputs"] = list(self.required_inputs)
        if self.is_component:
            out["isComponent"] = True
        return out


class FunctionSchema(BaseModel):
    """Schema of an invoke: its arguments and result."""

    description: str | None = None
    inputs: ObjectTypeSpec = Field(default_factory=ObjectTypeSpec)
    outputs: ObjectTypeSpec = Field(default_factory=ObjectTypeSpec)

    def to_schema(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.description:
            out["description"] = self.description
        out["inputs"] = self.inputs.to_schema()
        out["outputs"] = self.outputs.to_schema()
        return out


class PackageSchema(BaseModel):
    name: str
    version: str | None = None
    description: str | None = None
    resources: dict[str, ResourceSchema] = Field(default_factory=dict)
    functions: dict[str, FunctionSchema] = Field(default_factory=dict)
    types: dict[str, ObjectTypeSpec | EnumTypeSpec] = Field(default_factory=dict)

    def to_schema(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        if self.version:
            out["version"] = self.version
        if self.description:
            out["description"] = self.description
        out["resources"] = {tk: r.to_schema() for tk, r in self.resources.items()}
        out["functions"] = {tk: f.to_schema() for tk, f in self.functions.items()}
        out["types"] = {tk: t.to_schema() for tk, t in self.types.items()}
        return out


# =============================================================================
# Results
# =============================================================================

S = TypeVar("S")


@dataclass
class InferenceResult(Generic[S]):
    """A schema together with every diagnostic raised while building it.

    The schema holds whatever could be inferred; a broken input type does
    not hide a valid output type.
    """

    schema: S
    errors: list[InferenceError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self, context: str = "schema inference failed") -> S:
        """Return the schema, or raise every collected error at once."""
        if self.errors:
            raise SchemaInferenceErrorGroup(f"{context} ({len(self.errors)} errors)", self.errors)
        return self.schema

"""provinfer: infer provider package schemas from annotated Python types."""

from provinfer.annotator import Annotator, TypeMetadata
from provinfer.base import Schema
from provinfer.errors import (
    AnnotationError,
    InferenceError,
    InputContractError,
    MalformedExternalTypeError,
    MapKeyError,
    MissingExternalTypeError,
    OutputContractError,
    SchemaInferenceErrorGroup,
    TagParseError,
    TokenResolutionError,
    UnsupportedKindError,
    UnterminatedRecursionError,
)
from provinfer.provider import (
    ComponentResource,
    CustomResource,
    Provider,
    component,
    function,
    resource,
)
from provinfer.registry import TokenRegistry
from provinfer.schema import InferenceResult, PackageSchema, PropertySpec, ResourceSchema
from provinfer.tags import Field, Tag
from provinfer.token import ExternalLocator, Token
from provinfer.wrappers import (
    BoolInput,
    BoolOutput,
    FloatInput,
    FloatOutput,
    Input,
    IntInput,
    IntOutput,
    Output,
    StringInput,
    StringOutput,
)

__all__ = [
    "AnnotationError",
    "Annotator",
    "BoolInput",
    "BoolOutput",
    "ComponentResource",
    "CustomResource",
    "ExternalLocator",
    "Field",
    "FloatInput",
    "FloatOutput",
    "InferenceError",
    "InferenceResult",
    "Input",
    "InputContractError",
    "IntInput",
    "IntOutput",
    "MalformedExternalTypeError",
    "MapKeyError",
    "MissingExternalTypeError",
    "Output",
    "OutputContractError",
    "PackageSchema",
    "PropertySpec",
    "Provider",
    "ResourceSchema",
    "Schema",
    "SchemaInferenceErrorGroup",
    "StringInput",
    "StringOutput",
    "Tag",
    "TagParseError",
    "Token",
    "TokenRegistry",
    "TokenResolutionError",
    "TypeMetadata",
    "UnsupportedKindError",
    "UnterminatedRecursionError",
    "component",
    "function",
    "resource",
]

"""Tests for resource, function, object and enum schema assembly."""

from enum import Enum, IntEnum
from typing import Annotated

import pytest

from provinfer import (
    Annotator,
    ComponentResource,
    CustomResource,
    Schema,
    SchemaInferenceErrorGroup,
    StringInput,
    Tag,
)
from provinfer.errors import AnnotationError, MapKeyError, TagParseError, UnsupportedKindError
from provinfer.infer.assembler import SchemaAssembler
from provinfer.registry import TokenRegistry
from provinfer.schema import PrimitiveKind


class Inv(CustomResource):
    pass


class InvInput(Schema):
    field: Annotated[str, Tag("field")]


class InvOutput(Schema):
    out: Annotated[str, Tag("out,secret")]


class Site(ComponentResource):
    def annotate(self, a: Annotator) -> None:
        a.describe(self, "A static website.")


class SiteArgs(Schema):
    index_document: Annotated[str, Tag("indexDocument")]
    domain: Annotated[StringInput, Tag("domain,optional")] = None


class SiteState(Schema):
    url: str


class BadArgs(Schema):
    ports: dict[int, int]


class BadState(Schema):
    status: Annotated[str, Tag("status,bogus")]


class HookedArgs(Schema):
    size: int

    def annotate(self, a: Annotator) -> None:
        a.describe(42, "Size in GiB.")


class FlakyInv(CustomResource):
    def annotate(self, a: Annotator) -> None:
        raise RuntimeError("lookup failed")


class GetIp(Schema):
    def annotate(self, a: Annotator) -> None:
        a.describe(self, "Look up an address.")


class GetIpArgs(Schema):
    host: str


class GetIpResult(Schema):
    address: str
    ttl: int | None = None


class Endpoint(Schema):
    """Where a service listens."""

    host: str
    port: int

    def annotate(self, a: Annotator) -> None:
        a.describe(self, "A network endpoint.")


class Tier(Enum):
    """Service tier of a bucket."""

    FREE = "free"
    PAID = "paid"


class Priority(IntEnum):
    LOW = 1
    HIGH = 2


class Mixed(Enum):
    NAME = "name"
    NUMBER = 1


class Pair(Enum):
    ORIGIN = (0, 0)


class TestResource:
    def test_resource_schema(self, assembler: SchemaAssembler) -> None:
        found = assembler.resource(Inv, InvInput, InvOutput)
        assert found.ok
        assert found.schema.to_schema() == {
            "properties": {"out": {"type": "string", "secret": True}},
            "required": ["out"],
            "inputProperties": {"field": {"type": "string"}},
            "requiredInputs": ["field"],
        }

    def test_component_schema(self, assembler: SchemaAssembler) -> None:
        found = assembler.resource(Site, SiteArgs, SiteState, is_component=True)
        assert found.ok
        assert found.schema.to_schema() == {
            "description": "A static website.",
            "properties": {"url": {"type": "string", "plain": True}},
            "required": ["url"],
            "inputProperties": {
                "indexDocument": {"type": "string", "plain": True},
                "domain": {"type": "string"},
            },
            "requiredInputs": ["indexDocument"],
            "isComponent": True,
        }

    def test_broken_side_does_not_hide_the_other(self, assembler: SchemaAssembler) -> None:
        found = assembler.resource(Inv, BadArgs, InvOutput)
        assert not found.ok
        assert list(found.schema.output_properties) == ["out"]
        assert found.schema.input_properties == {}
        (error,) = found.errors
        assert isinstance(error, MapKeyError)
        assert error.__notes__[-1] == "could not serialize input type BadArgs"

    def test_errors_from_both_sides(self, assembler: SchemaAssembler) -> None:
        found = assembler.resource(Inv, BadArgs, BadState)
        assert [type(e) for e in found.errors] == [TagParseError, MapKeyError]
        assert found.errors[0].__notes__[-1] == "could not serialize output type BadState"

    def test_failing_input_hook_does_not_stop_assembly(self, assembler: SchemaAssembler) -> None:
        found = assembler.resource(Inv, HookedArgs, InvOutput)
        (error,) = found.errors
        assert isinstance(error, AnnotationError)
        assert isinstance(error.__cause__, TypeError)
        assert error.__notes__[-1] == "could not serialize input type HookedArgs"
        assert list(found.schema.output_properties) == ["out"]
        assert list(found.schema.input_properties) == ["size"]
        assert found.schema.required_inputs == ["size"]

    def test_failing_controller_hook_drops_description(self, assembler: SchemaAssembler) -> None:
        found = assembler.resource(FlakyInv, InvInput, InvOutput)
        (error,) = found.errors
        assert isinstance(error, AnnotationError)
        assert "lookup failed" in str(error)
        assert error.__notes__ == ["could not describe FlakyInv"]
        assert found.schema.description is None
        assert list(found.schema.input_properties) == ["field"]

    def test_raise_for_errors(self, assembler: SchemaAssembler) -> None:
        found = assembler.resource(Inv, BadArgs, BadState)
        with pytest.raises(SchemaInferenceErrorGroup, match="2 errors") as exc_info:
            found.raise_for_errors()
        assert list(exc_info.value.exceptions) == found.errors

    def test_raise_for_errors_returns_schema(self, assembler: SchemaAssembler) -> None:
        found = assembler.resource(Inv, InvInput, InvOutput)
        assert found.raise_for_errors() is found.schema


class TestFunction:
    def test_function_schema(self, assembler: SchemaAssembler) -> None:
        found = assembler.function(GetIp, GetIpArgs, GetIpResult)
        assert found.ok
        assert found.schema.to_schema() == {
            "description": "Look up an address.",
            "inputs": {
                "type": "object",
                "properties": {"host": {"type": "string"}},
                "required": ["host"],
            },
            "outputs": {
                "type": "object",
                "properties": {"address": {"type": "string"}, "ttl": {"type": "integer"}},
                "required": ["address", "ttl"],
            },
        }


class TestObjectType:
    def test_object_type(self, assembler: SchemaAssembler) -> None:
        found = assembler.object_type(Endpoint)
        assert found.ok
        assert found.schema.to_schema() == {
            "type": "object",
            "properties": {"host": {"type": "string"}, "port": {"type": "integer"}},
            "required": ["host", "port"],
            "description": "A network endpoint.",
        }

    def test_nested_struct_registers(self, assembler: SchemaAssembler, registry: TokenRegistry) -> None:
        class Listener(Schema):
            endpoint: Endpoint

        found = assembler.object_type(Listener)
        assert found.schema.properties["endpoint"].to_schema() == {
            "$ref": "#/types/test:test_assembler:Endpoint"
        }
        assert Endpoint in registry


class TestEnumType:
    def test_string_enum(self, assembler: SchemaAssembler) -> None:
        found = assembler.enum_type(Tier)
        assert found.ok
        assert found.schema.to_schema() == {
            "type": "string",
            "enum": [{"name": "FREE", "value": "free"}, {"name": "PAID", "value": "paid"}],
            "description": "Service tier of a bucket.",
        }

    def test_int_enum(self, assembler: SchemaAssembler) -> None:
        found = assembler.enum_type(Priority)
        assert found.schema.type is PrimitiveKind.INTEGER
        assert [v.value for v in found.schema.values] == [1, 2]

    def test_mixed_values(self, assembler: SchemaAssembler) -> None:
        (error,) = assembler.enum_type(Mixed).errors
        assert isinstance(error, UnsupportedKindError)
        assert "mixes" in error.__notes__[0]

    def test_unsupported_value(self, assembler: SchemaAssembler) -> None:
        (error,) = assembler.enum_type(Pair).errors
        assert isinstance(error, UnsupportedKindError)
        assert error.kind == "tuple"
        assert error.__notes__ == ["value of enum member Pair.ORIGIN"]


def test_create_uses_a_fresh_registry_by_default() -> None:
    assert len(SchemaAssembler.create().registry) == 0

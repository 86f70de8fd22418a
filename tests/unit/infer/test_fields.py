"""Tests for collecting the property list of a struct type."""

from dataclasses import dataclass, field
from typing import Annotated, Any

from provinfer import Annotator, Field, Schema, StringInput, Tag
from provinfer.errors import (
    AnnotationError,
    MapKeyError,
    MissingExternalTypeError,
    TagParseError,
    UnsupportedKindError,
)
from provinfer.infer.fields import FieldCollector
from provinfer.schema import PrimitiveKind, PrimitiveType


class ForeignUser:
    def urn(self) -> Any:
        return "urn:user"


class BucketArgs(Schema):
    bucket_name: Annotated[str, Tag("bucketName,replaceOnChanges")]
    region: str = Field(tag="region,optional", default="")
    api_token: str = Field(tag="apiToken", secret=True, description="Token used to call the API.")
    versioning: bool | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    owner: Annotated[ForeignUser, Tag("owner,type=aws@6.0.0:iam:User")]
    cache: Annotated[Any, Tag("cache,internal")] = None
    policy: StringInput = Field(alias="bucketPolicy")

    def annotate(self, a: Annotator) -> None:
        a.describe("bucket_name", "Name of the bucket.")
        a.describe("api_token", "Overridden description.")
        a.set_default("region", "us-east-1", "AWS_REGION")


@dataclass
class RuleArgs:
    port: int
    protocol: Annotated[str, Tag("proto")] = "tcp"
    note: str = field(default="", metadata={"provider": "note,optional"})


type ApiToken = Annotated[str, Tag("apiToken,secret")]


class TokenArgs(Schema):
    token: ApiToken | None = None


class BadHook(Schema):
    size: int

    def annotate(self, a: Annotator) -> None:
        a.describe(42, "Size in GiB.")


class Broken(Schema):
    good: int
    bad_tag: Annotated[int, Tag("bad,nonsense")]
    bad_map: dict[int, str]
    taken: Annotated[int, Tag("good")]
    role: ForeignUser
    after: str


class TestCollect:
    def test_names_follow_tags(self, collector: FieldCollector) -> None:
        found = collector.collect(BucketArgs)
        assert list(found.properties) == [
            "bucketName",
            "region",
            "apiToken",
            "versioning",
            "labels",
            "owner",
            "bucketPolicy",
        ]
        assert found.errors == []

    def test_required(self, collector: FieldCollector) -> None:
        found = collector.collect(BucketArgs)
        assert found.required == [
            "bucketName",
            "apiToken",
            "versioning",
            "labels",
            "owner",
            "bucketPolicy",
        ]
        assert not found.properties["region"].required

    def test_nullable_field_is_still_required(self, collector: FieldCollector) -> None:
        class Args(Schema):
            size: int | None = None
            zone: Annotated[str | None, Tag("zone,optional")] = None

        found = collector.collect(Args)
        assert found.required == ["size"]
        assert found.properties["size"].type == PrimitiveType(primitive=PrimitiveKind.INTEGER)

    def test_flags(self, collector: FieldCollector) -> None:
        props = collector.collect(BucketArgs).properties
        assert props["bucketName"].replace_on_changes
        assert props["apiToken"].secret
        assert not props["region"].secret

    def test_internal_field_is_skipped(self, collector: FieldCollector) -> None:
        assert "cache" not in collector.collect(BucketArgs).properties

    def test_descriptions_and_defaults(self, collector: FieldCollector) -> None:
        props = collector.collect(BucketArgs).properties
        assert props["bucketName"].description == "Name of the bucket."
        assert props["apiToken"].description == "Overridden description."
        assert props["region"].to_schema() == {
            "type": "string",
            "default": "us-east-1",
            "defaultInfo": {"environment": ["AWS_REGION"]},
        }

    def test_pydantic_description_is_the_fallback(self, collector: FieldCollector) -> None:
        class Args(Schema):
            api_token: str = Field(description="Token used to call the API.")

        props = collector.collect(Args).properties
        assert props["api_token"].description == "Token used to call the API."

    def test_types(self, collector: FieldCollector) -> None:
        props = collector.collect(BucketArgs).properties
        assert props["labels"].to_schema() == {
            "type": "object",
            "additionalProperties": {"type": "string"},
        }
        assert props["owner"].to_schema() == {
            "$ref": "/aws/6.0.0/schema.json#/resources/aws:iam:User"
        }
        assert props["bucketPolicy"].type == PrimitiveType(primitive=PrimitiveKind.STRING)

    def test_plain(self, collector: FieldCollector) -> None:
        props = collector.collect(BucketArgs, plain=True).properties
        assert props["region"].to_schema() == {
            "type": "string",
            "plain": True,
            "default": "us-east-1",
            "defaultInfo": {"environment": ["AWS_REGION"]},
        }
        assert props["bucketPolicy"].to_schema() == {"type": "string"}

    def test_dataclass(self, collector: FieldCollector) -> None:
        found = collector.collect(RuleArgs)
        assert list(found.properties) == ["port", "proto", "note"]
        assert found.required == ["port", "proto"]

    def test_optional_struct_is_unwrapped(self, collector: FieldCollector) -> None:
        assert list(collector.collect(RuleArgs | None).properties) == ["port", "proto", "note"]


class TestNestedTags:
    def test_tag_inside_optional(self, collector: FieldCollector) -> None:
        class Args(Schema):
            token: Annotated[str, Tag("apiToken,secret")] | None = None

        found = collector.collect(Args)
        assert list(found.properties) == ["apiToken"]
        assert found.properties["apiToken"].secret
        assert found.properties["apiToken"].type == PrimitiveType(primitive=PrimitiveKind.STRING)
        assert found.errors == []

    def test_tag_inside_optional_dataclass(self, collector: FieldCollector) -> None:
        @dataclass
        class Args:
            token: Annotated[str, Tag("apiToken,secret")] | None = None

        props = collector.collect(Args).properties
        assert list(props) == ["apiToken"]
        assert props["apiToken"].secret

    def test_tag_inside_alias(self, collector: FieldCollector) -> None:
        found = collector.collect(TokenArgs)
        assert list(found.properties) == ["apiToken"]
        assert found.properties["apiToken"].secret

    def test_outer_and_nested_tag_is_an_error(self, collector: FieldCollector) -> None:
        class Args(Schema):
            token: Annotated[Annotated[str, Tag("inner")] | None, Tag("outer")] = None

        found = collector.collect(Args)
        assert found.properties == {}
        assert [type(e) for e in found.errors] == [TagParseError]


class TestErrors:
    def test_not_a_struct(self, collector: FieldCollector) -> None:
        found = collector.collect(int)
        assert found.properties == {}
        assert len(found.errors) == 1
        assert isinstance(found.errors[0], UnsupportedKindError)

    def test_broken_fields_are_reported_together(self, collector: FieldCollector) -> None:
        found = collector.collect(Broken)
        assert [type(e) for e in found.errors] == [
            TagParseError,
            MapKeyError,
            TagParseError,
            MissingExternalTypeError,
        ]
        assert list(found.properties) == ["good", "after"]
        assert found.required == ["good", "after"]

    def test_errors_carry_their_location(self, collector: FieldCollector) -> None:
        bad_tag, bad_map, taken, role = collector.collect(Broken).errors
        assert bad_tag.__notes__ == ["invalid field 'bad_tag' on 'Broken'"]
        assert bad_map.__notes__ == ["invalid type 'dict[int, str]' on 'Broken.bad_map'"]
        assert "used twice" in str(taken)
        assert role.__notes__ == ["invalid type 'ForeignUser' on 'Broken.role'"]

    def test_failing_annotate_hook_is_reported(self, collector: FieldCollector) -> None:
        found = collector.collect(BadHook)
        (error,) = found.errors
        assert isinstance(error, AnnotationError)
        assert isinstance(error.__cause__, TypeError)
        assert error.__notes__ == ["invalid annotations on 'BadHook'"]
        assert list(found.properties) == ["size"]
        assert found.description is None

"""Type-level metadata: descriptions, defaults and token overrides.

A type opts in by defining ``annotate``::

    class BucketArgs(Schema):
        name: str
        region: str

        def annotate(self, a: Annotator) -> None:
            a.describe(self, "Arguments for a storage bucket.")
            a.describe("region", "Region the bucket lives in.")
            a.set_default("region", "us-east-1", "AWS_REGION", "AWS_DEFAULT_REGION")

``annotate`` runs on an uninitialised instance, so it should only refer to
fields by name.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from provinfer.capability import Annotatable, zero_value
from provinfer.errors import AnnotationError, InferenceError, TagParseError
from provinfer.introspect import is_struct, strip_indirection, struct_fields
from provinfer.tags import find_tag_text, parse_tag

logger = logging.getLogger(__name__)


class TypeMetadata(BaseModel):
    """Metadata collected from a type's ``annotate`` hook.

    The empty key in ``descriptions`` is the description of the type itself.
    """

    descriptions: dict[str, str] = Field(default_factory=dict)
    defaults: dict[str, Any] = Field(default_factory=dict)
    default_envs: dict[str, list[str]] = Field(default_factory=dict)
    token: tuple[str, str] | None = None  # (module, name)


class Annotator:
    """Collects metadata for one type."""

    def __init__(self, target: type, names: Mapping[str, str] | None = None) -> None:
        self._target = target
        self._names = dict(names or {})
        self.metadata = TypeMetadata()

    def _key(self, field: Any) -> str:
        if isinstance(field, self._target):
            return ""
        if isinstance(field, str):
            return self._names.get(field, field)
        raise TypeError(
            f"cannot annotate {field!r} on {self._target.__name__}: "
            "pass the instance itself or a field name"
        )

    def describe(self, field: Any, description: str) -> None:
        """Attach a description to a field, or to the type when given ``self``."""
        self.metadata.descriptions[self._key(field)] = inspect.cleandoc(description)

    def set_default(self, field: Any, value: Any, *env_vars: str) -> None:
        """Set a field's default value and the variables that may supply it."""
        key = self._key(field)
        self.metadata.defaults[key] = value
        if env_vars:
            self.metadata.default_envs[key] = list(env_vars)

    def set_token(self, module: str, name: str) -> None:
        """Override the ``module:name`` part of the type's token."""
        self.metadata.token = (module, name)


def exposed_names(t: type) -> dict[str, str]:
    """Map attribute names to published names, skipping unparsable tags."""
    names: dict[str, str] = {}
    if not is_struct(t):
        return names
    for f in struct_fields(t):
        try:
            tag = parse_tag(find_tag_text(f.metadata, f.extra), f.alias or f.attribute)
        except TagParseError:
            continue
        names[f.attribute] = tag.name
    return names


def get_annotated(t: Any) -> TypeMetadata:
    """Run ``t``'s annotate hook, or return empty metadata when it has none."""
    t = strip_indirection(t)
    instance = zero_value(t)
    if not isinstance(instance, Annotatable):
        return TypeMetadata()

    a = Annotator(t, exposed_names(t))
    try:
        instance.annotate(a)
    except InferenceError:
        raise
    except Exception as e:
        raise AnnotationError(f"{t.__qualname__}.annotate failed: {e}") from e
    logger.debug(
        "Annotated %s: %d descriptions, %d defaults",
        t.__qualname__,
        len(a.metadata.descriptions),
        len(a.metadata.defaults),
    )
    return a.metadata

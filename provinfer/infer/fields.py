"""Field collection: the property list of one struct type."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from provinfer.annotator import TypeMetadata, get_annotated
from provinfer.errors import InferenceError, TagParseError, UnsupportedKindError
from provinfer.infer.walker import TypeWalker
from provinfer.introspect import is_struct, strip_indirection, struct_fields, type_name
from provinfer.schema import PropertySpec
from provinfer.tags import find_tag_text, parse_tag

logger = logging.getLogger(__name__)


@dataclass
class PropertyList:
    """Property list of a struct plus the errors met while collecting it."""

    properties: dict[str, PropertySpec] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)
    errors: list[InferenceError] = field(default_factory=list)
    description: str | None = None


class FieldCollector:
    def __init__(self, walker: TypeWalker) -> None:
        self.walker = walker

    def collect(self, t: Any, *, plain: bool = False) -> PropertyList:
        """Build the property list of struct ``t``.

        A broken field is left out and its error recorded; the other fields
        are still collected.
        """
        result = PropertyList()
        t = strip_indirection(t)
        if not is_struct(t):
            result.errors.append(UnsupportedKindError(type_name(t)))
            return result

        owner = type_name(t)
        try:
            annotations = get_annotated(t)
        except InferenceError as e:
            e.add_note(f"invalid annotations on '{owner}'")
            result.errors.append(e)
            annotations = TypeMetadata()
        result.description = annotations.descriptions.get("")

        for f in struct_fields(t):
            try:
                tag = parse_tag(find_tag_text(f.metadata, f.extra), f.alias or f.attribute)
                if tag.name in result.properties:
                    raise TagParseError(f"property name {tag.name!r} is used twice")
            except TagParseError as e:
                e.add_note(f"invalid field '{f.attribute}' on '{owner}'")
                result.errors.append(e)
                continue

            if tag.internal:
                logger.debug("Skipping internal field %s.%s", owner, f.attribute)
                continue

            try:
                spec = self.walker.walk(f.annotation, plain=plain, external_type=tag.external_type)
            except InferenceError as e:
                e.add_note(f"invalid type '{type_name(f.annotation)}' on '{owner}.{f.attribute}'")
                result.errors.append(e)
                continue

            # a nullable annotation does not make a field optional; only the tag does
            required = not tag.optional
            if required:
                result.required.append(tag.name)

            result.properties[tag.name] = PropertySpec(
                name=tag.name,
                type=spec,
                required=required,
                secret=tag.secret,
                replace_on_changes=tag.replace_on_changes,
                description=annotations.descriptions.get(tag.name) or f.description,
                default=annotations.defaults.get(tag.name),
                default_envs=annotations.default_envs.get(tag.name, []),
            )

        return result

"""Assembly of resource, function, object and enum schemas."""

from __future__ import annotations

import inspect
import logging
from enum import Enum
from typing import Any

from provinfer.annotator import get_annotated
from provinfer.errors import InferenceError, UnsupportedKindError
from provinfer.infer.fields import FieldCollector, PropertyList
from provinfer.infer.reference import TokenResolver
from provinfer.infer.walker import TypeWalker
from provinfer.introspect import type_name
from provinfer.registry import TokenRegistry
from provinfer.schema import (
    EnumTypeSpec,
    EnumValueSpec,
    FunctionSchema,
    InferenceResult,
    ObjectTypeSpec,
    PrimitiveKind,
    ResourceSchema,
)

logger = logging.getLogger(__name__)

_ENUM_KINDS: tuple[tuple[type, PrimitiveKind], ...] = (
    (bool, PrimitiveKind.BOOLEAN),
    (int, PrimitiveKind.INTEGER),
    (float, PrimitiveKind.NUMBER),
    (str, PrimitiveKind.STRING),
)


def _noted(errors: list[InferenceError], note: str) -> list[InferenceError]:
    for e in errors:
        e.add_note(note)
    return errors


class SchemaAssembler:
    """Runs field collection over paired types and aggregates the errors."""

    def __init__(self, collector: FieldCollector) -> None:
        self.collector = collector

    @classmethod
    def create(
        cls,
        registry: TokenRegistry | None = None,
        *,
        allow_missing_external_types: bool = False,
    ) -> SchemaAssembler:
        """Wire up resolver, walker and collector around one registry."""
        resolver = TokenResolver(
            registry or TokenRegistry(),
            allow_missing_external_types=allow_missing_external_types,
        )
        return cls(FieldCollector(TypeWalker(resolver)))

    @property
    def registry(self) -> TokenRegistry:
        return self.collector.walker.resolver.registry

    def _describe(self, controller: type) -> tuple[str | None, list[InferenceError]]:
        try:
            return get_annotated(controller).descriptions.get(""), []
        except InferenceError as e:
            e.add_note(f"could not describe {type_name(controller)}")
            return None, [e]

    def _collect(self, t: Any, side: str, plain: bool) -> PropertyList:
        found = self.collector.collect(t, plain=plain)
        _noted(found.errors, f"could not serialize {side} type {type_name(t)}")
        return found

    def resource(
        self,
        controller: type,
        inputs: type,
        outputs: type,
        *,
        is_component: bool = False,
    ) -> InferenceResult[ResourceSchema]:
        """Schema of a resource with input type ``inputs`` and state type ``outputs``.

        Components mark their non-wrapped properties plain.
        """
        description, errors = self._describe(controller)
        state = self._collect(outputs, "output", is_component)
        args = self._collect(inputs, "input", is_component)

        schema = ResourceSchema(
            description=description,
            output_properties=state.properties,
            required_outputs=state.required,
            input_properties=args.properties,
            required_inputs=args.required,
            is_component=is_component,
        )
        logger.debug(
            "Inferred %s: %d outputs, %d inputs, %d errors",
            type_name(controller),
            len(state.properties),
            len(args.properties),
            len(errors) + len(state.errors) + len(args.errors),
        )
        return InferenceResult(schema, [*errors, *state.errors, *args.errors])

    def function(self, controller: type, inputs: type, outputs: type) -> InferenceResult[FunctionSchema]:
        """Schema of an invoke taking ``inputs`` and returning ``outputs``."""
        description, errors = self._describe(controller)
        args = self._collect(inputs, "input", False)
        result = self._collect(outputs, "output", False)

        schema = FunctionSchema(
            description=description,
            inputs=ObjectTypeSpec(properties=args.properties, required=args.required),
            outputs=ObjectTypeSpec(properties=result.properties, required=result.required),
        )
        return InferenceResult(schema, [*errors, *args.errors, *result.errors])

    def object_type(self, t: type) -> InferenceResult[ObjectTypeSpec]:
        found = self._collect(t, "object", False)
        schema = ObjectTypeSpec(
            description=found.description,
            properties=found.properties,
            required=found.required,
        )
        return InferenceResult(schema, found.errors)

    def enum_type(self, t: type[Enum]) -> InferenceResult[EnumTypeSpec]:
        """Enum type entry: members in definition order, one value kind."""
        kinds: set[PrimitiveKind] = set()
        values: list[EnumValueSpec] = []
        for member in t:
            kind = next((k for py, k in _ENUM_KINDS if isinstance(member.value, py)), None)
            if kind is None:
                error = UnsupportedKindError(type_name(type(member.value)))
                error.add_note(f"value of enum member {t.__name__}.{member.name}")
                return InferenceResult(EnumTypeSpec(type=PrimitiveKind.STRING, values=[]), [error])
            kinds.add(kind)
            values.append(EnumValueSpec(name=member.name, value=member.value))

        if len(kinds) > 1:
            error = UnsupportedKindError(type_name(t))
            error.add_note(f"enum {t.__name__} mixes {', '.join(sorted(kinds))} values")
            return InferenceResult(EnumTypeSpec(type=PrimitiveKind.STRING, values=values), [error])

        doc = t.__dict__.get("__doc__")
        if doc == "An enumeration.":
            doc = None
        return InferenceResult(
            EnumTypeSpec(
                type=kinds.pop() if kinds else PrimitiveKind.STRING,
                values=values,
                description=inspect.cleandoc(doc) if doc else None,
            )
        )

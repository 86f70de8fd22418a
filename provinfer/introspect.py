"""Runtime introspection of struct types.

A struct is a pydantic model or a dataclass. Everything the engine needs to
know about one (its fields, their declared types and tag sources) comes
through here, so the rest of the package never touches ``model_fields`` or
``dataclasses.fields`` directly.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Annotated, Any, TypeAliasType, get_args, get_origin

from pydantic import BaseModel

from provinfer.errors import UnterminatedRecursionError

NoneType = type(None)


@dataclass(frozen=True)
class StructField:
    """One declared field of a struct type."""

    attribute: str
    annotation: Any
    metadata: tuple[Any, ...] = ()
    extra: Mapping[str, Any] | None = None
    alias: str | None = None
    description: str | None = None


def is_struct(t: Any) -> bool:
    """Whether ``t`` is a pydantic model class or a dataclass type."""
    if not isinstance(t, type):
        return False
    return issubclass(t, BaseModel) or dataclasses.is_dataclass(t)


def struct_fields(t: type) -> list[StructField]:
    """List the fields of a struct type in declaration order."""
    if issubclass(t, BaseModel):
        return [
            StructField(
                attribute=name,
                annotation=info.annotation,
                metadata=(*info.metadata, *layer_metadata(info.annotation)),
                extra=info.json_schema_extra if isinstance(info.json_schema_extra, dict) else None,
                alias=info.alias,
                description=info.description,
            )
            for name, info in t.model_fields.items()
        ]

    hints = typing.get_type_hints(t, include_extras=True)
    result: list[StructField] = []
    for f in dataclasses.fields(t):
        annotation = hints.get(f.name, f.type)
        metadata = layer_metadata(annotation)
        if get_origin(annotation) is Annotated:
            annotation = get_args(annotation)[0]
        result.append(
            StructField(
                attribute=f.name,
                annotation=annotation,
                metadata=metadata,
                extra=f.metadata or None,
            )
        )
    return result


def is_union(t: Any) -> bool:
    return get_origin(t) in (typing.Union, types.UnionType)


def layer_metadata(t: Any, seen: set[int] | None = None) -> tuple[Any, ...]:
    """Collect ``Annotated`` extras from the indirection layers of ``t``.

    Covers ``Annotated[T, x] | None`` and aliases of it, where pydantic leaves
    the extras nested. Container arguments are not searched: metadata there
    belongs to the element, not the field.
    """
    if seen is None:
        seen = set()
    if isinstance(t, TypeAliasType):
        if id(t) in seen:
            return ()
        seen.add(id(t))
        return layer_metadata(t.__value__, seen)
    if get_origin(t) is Annotated:
        return (*t.__metadata__, *layer_metadata(get_args(t)[0], seen))
    if is_union(t):
        return tuple(m for member in get_args(t) for m in layer_metadata(member, seen))
    return ()


def strip_indirection(t: Any, seen: set[int] | None = None) -> Any:
    """Peel ``Optional``, ``Annotated`` and ``type`` alias layers off ``t``.

    A union with more than one non-None member is returned as is. Expanded
    aliases are recorded in ``seen``; meeting one again is unterminated
    recursion.
    """
    if seen is None:
        seen = set()
    while True:
        if isinstance(t, TypeAliasType):
            if id(t) in seen:
                raise UnterminatedRecursionError(
                    f"type alias {t.__name__} refers back to itself without a named type in between"
                )
            seen.add(id(t))
            t = t.__value__
        elif get_origin(t) is Annotated:
            t = get_args(t)[0]
        elif is_union(t):
            members = [a for a in get_args(t) if a is not NoneType]
            if len(members) != 1:
                return t
            t = members[0]
        else:
            return t


def type_name(t: Any) -> str:
    """Readable name of a type for diagnostics."""
    if isinstance(t, type) and get_origin(t) is None:
        return t.__qualname__
    return repr(t).removeprefix("typing.")

"""Type walker: turns a declared Python type into a TypeSpec."""

from __future__ import annotations

import collections.abc
import logging
from typing import Any, get_args, get_origin

from provinfer.capability import ResourceLike, SelfDescribing, implements
from provinfer.errors import MapKeyError, UnsupportedKindError
from provinfer.infer.reference import TokenResolver, is_enum
from provinfer.infer.wrapper import underlying_type
from provinfer.introspect import is_struct, strip_indirection, type_name
from provinfer.schema import (
    AnyType,
    ArrayType,
    EnumRefType,
    MapType,
    PrimitiveKind,
    PrimitiveType,
    TypeSpec,
)

logger = logging.getLogger(__name__)

_MAP_TYPES: frozenset[Any] = frozenset(
    {dict, collections.abc.Mapping, collections.abc.MutableMapping}
)
_ARRAY_TYPES: frozenset[Any] = frozenset(
    {
        list,
        set,
        frozenset,
        tuple,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Set,
        collections.abc.MutableSet,
    }
)

# bool first: it is a subclass of int
_PRIMITIVES: tuple[tuple[type, PrimitiveKind], ...] = (
    (bool, PrimitiveKind.BOOLEAN),
    (int, PrimitiveKind.INTEGER),
    (float, PrimitiveKind.NUMBER),
    (str, PrimitiveKind.STRING),
)


def _is_reference(t: Any) -> bool:
    return (
        is_enum(t)
        or is_struct(t)
        or implements(t, SelfDescribing)
        or implements(t, ResourceLike)
    )


def _sequence_element(t: Any, args: tuple[Any, ...]) -> Any:
    if not args:
        return Any
    if get_origin(t) is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
        if any(a is not args[0] for a in args):
            raise UnsupportedKindError(type_name(t))
    return args[0]


class TypeWalker:
    """Produces the TypeSpec of a field type."""

    def __init__(self, resolver: TokenResolver) -> None:
        self.resolver = resolver

    @property
    def registry(self):
        return self.resolver.registry

    def walk(self, t: Any, *, plain: bool = False, external_type: str = "") -> TypeSpec:
        """Describe ``t``.

        ``plain`` asks for non-wrapped primitives and containers to be marked
        plain. ``external_type`` is the field's ``type=`` locator.
        """
        return self._walk(t, plain, external_type, frozenset())

    def _walk(self, t: Any, plain: bool, external_type: str, path: frozenset[int]) -> TypeSpec:
        seen = set(path)
        t = strip_indirection(t, seen)
        path = frozenset(seen)

        if is_enum(t):
            return EnumRefType(token=self.registry.register(t))

        found = self.resolver.classify(t, external_type)
        if found.matched:
            # tolerated untagged foreign resources classify with no spec and are published as Any
            return found.spec if found.spec is not None else AnyType()

        base, wrapped = underlying_type(t)
        if wrapped and _is_reference(base):
            return self._walk(base, False, external_type, path)
        plain = plain and not wrapped

        origin = get_origin(base)
        args = get_args(base)

        if base in _MAP_TYPES or origin in _MAP_TYPES:
            key, value = args if len(args) == 2 else (str, Any)
            key_base = strip_indirection(key)
            if not (isinstance(key_base, type) and issubclass(key_base, str)):
                raise MapKeyError(type_name(key))
            element = self._walk(value, plain, external_type, path)
            return MapType(additional_properties=element, plain=plain)

        if base in _ARRAY_TYPES or origin in _ARRAY_TYPES:
            element = self._walk(_sequence_element(base, args), plain, external_type, path)
            return ArrayType(items=element, plain=plain)

        if base is Any or base is object:
            return AnyType()

        if isinstance(base, type) and origin is None:
            for py_type, kind in _PRIMITIVES:
                if issubclass(base, py_type):
                    return PrimitiveType(primitive=kind, plain=plain)

        raise UnsupportedKindError(type_name(base))

"""Capabilities the inference engine probes for on user types.

These are structural: a type never has to inherit from anything here, it
only has to provide the methods.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from provinfer.annotator import Annotator


@runtime_checkable
class OutputLike(Protocol):
    """A deferred value that knows the type it will eventually carry."""

    def element_type(self) -> Any: ...

    def apply(self, fn: Callable[[Any], Any]) -> Any: ...


@runtime_checkable
class InputLike(Protocol):
    """A value that can be converted into an output of its element type."""

    def element_type(self) -> Any: ...


@runtime_checkable
class SelfDescribing(Protocol):
    """A resource or component that reports its own token."""

    def get_token(self) -> str: ...


@runtime_checkable
class ResourceLike(Protocol):
    """Any resource, including ones implemented by another provider."""

    def urn(self) -> Any: ...


@runtime_checkable
class Annotatable(Protocol):
    """A type that supplies descriptions, defaults and its token."""

    def annotate(self, a: Annotator) -> None: ...


def implements(t: Any, capability: type) -> bool:
    """Check a capability statically against a class."""
    if not isinstance(t, type):
        return False
    try:
        return issubclass(t, capability)
    except TypeError:
        return False


def zero_value(t: Any) -> Any | None:
    """Build an instance of ``t`` without running its initialiser.

    Returns None when ``t`` cannot be instantiated that way (typing
    constructs, enums, abstract builtins).
    """
    if not isinstance(t, type):
        return None
    try:
        return t.__new__(t)
    except (TypeError, ValueError):
        return None

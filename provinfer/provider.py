"""Provider declarations: which resources, components and functions it serves."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from provinfer.registry import DEFAULT_PACKAGE, derive_token

if TYPE_CHECKING:
    from provinfer.schema import InferenceResult, PackageSchema


class CustomResource:
    """Base for resources implemented by this provider.

    Subclasses get their token from ``annotate``/``set_token`` or from their
    module and class name.
    """

    def get_token(self) -> str:
        token = derive_token(type(self), DEFAULT_PACKAGE)
        return f"{token.module}:{token.name}"


class ComponentResource(CustomResource):
    """Base for components: resources composed of other resources."""


class DeclarationKind(StrEnum):
    RESOURCE = "resource"
    COMPONENT = "component"
    FUNCTION = "function"


@dataclass(frozen=True)
class Declaration:
    """A controller type paired with its input and output types."""

    kind: DeclarationKind
    controller: type
    inputs: type
    outputs: type

    def __post_init__(self) -> None:
        for role in ("controller", "inputs", "outputs"):
            value = getattr(self, role)
            if not isinstance(value, type):
                raise TypeError(f"{self.kind} {role} must be a class, got {value!r}")

    @property
    def is_component(self) -> bool:
        return self.kind is DeclarationKind.COMPONENT


def resource(controller: type, inputs: type, outputs: type) -> Declaration:
    """Declare a custom resource with argument type ``inputs`` and state type ``outputs``."""
    return Declaration(DeclarationKind.RESOURCE, controller, inputs, outputs)


def component(controller: type, inputs: type, outputs: type) -> Declaration:
    """Declare a component resource."""
    return Declaration(DeclarationKind.COMPONENT, controller, inputs, outputs)


def function(controller: type, inputs: type, outputs: type) -> Declaration:
    """Declare an invoke taking ``inputs`` and returning ``outputs``."""
    return Declaration(DeclarationKind.FUNCTION, controller, inputs, outputs)


@dataclass
class Provider:
    """Everything a provider publishes under one package name."""

    name: str
    version: str | None = None
    description: str | None = None
    resources: Sequence[Declaration] = field(default_factory=list)
    functions: Sequence[Declaration] = field(default_factory=list)

    def __post_init__(self) -> None:
        for decl in self.resources:
            if decl.kind is DeclarationKind.FUNCTION:
                raise ValueError(f"{decl.controller.__name__} is a function, not a resource")
        for decl in self.functions:
            if decl.kind is not DeclarationKind.FUNCTION:
                raise ValueError(f"{decl.controller.__name__} is a {decl.kind}, not a function")

    def schema(
        self,
        *,
        package: str | None = None,
        allow_missing_external_types: bool = False,
    ) -> InferenceResult[PackageSchema]:
        """Infer the package schema of this provider."""
        from provinfer.infer.package import build_package_schema

        return build_package_schema(
            self,
            package=package,
            allow_missing_external_types=allow_missing_external_types,
        )

"""Tokens: package-qualified identifiers for types, resources and functions.

Token format: ``{package}:{module}:{name}``
External locator format: ``{package}@{version}:{module}:{name}``
"""

from __future__ import annotations

import re
from typing import ClassVar, Self

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from provinfer.errors import MalformedExternalTypeError, TokenResolutionError

TYPES_PREFIX = "#/types/"
RESOURCES_PREFIX = "#/resources/"
ANY_REF = "pulumi.json#/Any"


class Token(BaseModel):
    """A ``package:module:name`` token."""

    model_config = ConfigDict(frozen=True)

    package: str
    module: str
    name: str

    _package_re: ClassVar[re.Pattern] = re.compile(r"^[a-zA-Z][a-zA-Z0-9_\-]*$")
    _module_re: ClassVar[re.Pattern] = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_/.\-]*$")
    _name_re: ClassVar[re.Pattern] = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

    @field_validator("package")
    @classmethod
    def _package_ok(cls, v: str) -> str:
        if not cls._package_re.match(v):
            raise ValueError(f"invalid package {v!r}")
        return v

    @field_validator("module")
    @classmethod
    def _module_ok(cls, v: str) -> str:
        if not cls._module_re.match(v):
            raise ValueError(f"invalid module {v!r}")
        return v

    @field_validator("name")
    @classmethod
    def _name_ok(cls, v: str) -> str:
        if not cls._name_re.match(v):
            raise ValueError(f"invalid name {v!r}")
        return v

    @classmethod
    def create(cls, package: str, module: str, name: str) -> Self:
        """Build a token, reporting bad parts as a TokenResolutionError."""
        try:
            return cls(package=package, module=module, name=name)
        except ValidationError as e:
            msg = f"invalid token '{package}:{module}:{name}': {e.errors()[0]['msg']}"
            raise TokenResolutionError(msg) from e

    @classmethod
    def parse(cls, text: str, *, package: str | None = None) -> Self:
        """Parse ``package:module:name``, or ``module:name`` when ``package`` is given."""
        parts = text.split(":")
        if len(parts) == 2 and package is not None:
            return cls.create(package, *parts)
        if len(parts) != 3:
            raise TokenResolutionError(f"invalid token {text!r}: expected package:module:name")
        return cls.create(*parts)

    def with_package(self, package: str) -> Self:
        return self.model_copy(update={"package": package})

    def render(self) -> str:
        return f"{self.package}:{self.module}:{self.name}"

    def __str__(self) -> str:
        return self.render()

    @property
    def type_ref(self) -> str:
        return TYPES_PREFIX + self.render()

    @property
    def resource_ref(self) -> str:
        return RESOURCES_PREFIX + self.render()


class ExternalLocator(BaseModel):
    """Where a resource defined by another package lives."""

    model_config = ConfigDict(frozen=True)

    package: str
    version: str
    module: str
    name: str

    @classmethod
    def parse(cls, text: str) -> Self:
        parts = text.split(":")
        if len(parts) != 3:
            raise MalformedExternalTypeError(
                f"invalid type= tag {text!r}: expected package@version:module:name"
            )
        head = parts[0].split("@")
        if len(head) != 2 or not all(head):
            raise MalformedExternalTypeError(
                f"invalid type= head {parts[0]!r}: expected package@version"
            )
        if not all(parts[1:]):
            raise MalformedExternalTypeError(f"invalid type= tag {text!r}: empty module or name")
        return cls(package=head[0], version=head[1], module=parts[1], name=parts[2])

    @property
    def token(self) -> str:
        return f"{self.package}:{self.module}:{self.name}"

    @property
    def resource_ref(self) -> str:
        return f"/{self.package}/{self.version}/schema.json{RESOURCES_PREFIX}{self.token}"

    def __str__(self) -> str:
        return f"{self.package}@{self.version}:{self.module}:{self.name}"

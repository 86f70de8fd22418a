"""Classification of struct types into resource and type references."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from provinfer.capability import OutputLike, ResourceLike, SelfDescribing, implements, zero_value
from provinfer.errors import InferenceError, MissingExternalTypeError, TokenResolutionError
from provinfer.introspect import is_struct, type_name
from provinfer.registry import TokenRegistry
from provinfer.schema import RefType, ResourceRefType
from provinfer.token import ExternalLocator, Token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying a type.

    ``matched`` without a ``spec`` means a foreign resource whose locator is
    missing and was tolerated.
    """

    spec: ResourceRefType | RefType | None = None
    matched: bool = False


NOT_A_REFERENCE = Classification()


def is_enum(t: Any) -> bool:
    return isinstance(t, type) and issubclass(t, Enum)


class TokenResolver:
    """Decides whether a type is a resource, a foreign resource or an object type."""

    def __init__(self, registry: TokenRegistry, *, allow_missing_external_types: bool = False) -> None:
        self.registry = registry
        self.allow_missing_external_types = allow_missing_external_types

    def resource_token(self, t: type) -> Token:
        """Ask a self-describing resource for its token."""
        instance = zero_value(t)
        if instance is None:
            raise TokenResolutionError(f"cannot instantiate {type_name(t)} to read its token")
        try:
            raw = instance.get_token()
        except InferenceError:
            raise
        except Exception as e:
            raise TokenResolutionError(f"{type_name(t)}.get_token failed: {e}") from e
        return Token.parse(str(raw), package=self.registry.package)

    def resource_reference(self, t: Any, external_type: str = "") -> Classification:
        if implements(t, SelfDescribing):
            return Classification(ResourceRefType(token=self.resource_token(t)), True)

        if implements(t, ResourceLike):
            if not external_type:
                if self.allow_missing_external_types:
                    logger.warning("Foreign resource %s has no type= tag, skipping", type_name(t))
                    return Classification(None, True)
                raise MissingExternalTypeError(f"missing type= tag on foreign resource {type_name(t)}")
            locator = ExternalLocator.parse(external_type)
            return Classification(ResourceRefType(locator=locator), True)

        return NOT_A_REFERENCE

    def struct_reference(self, t: Any) -> Classification:
        if not is_struct(t) or implements(t, OutputLike):
            return NOT_A_REFERENCE
        return Classification(RefType(token=self.registry.register(t)), True)

    def classify(self, t: Any, external_type: str = "") -> Classification:
        """Classify ``t``: resource first, then foreign resource, then object type."""
        found = self.resource_reference(t, external_type)
        if found.matched:
            return found
        return self.struct_reference(t)

"""Error hierarchy for provinfer.

Error layers:
- InferenceError: Base class for every schema inference diagnostic
- TypeShapeError: The declared type graph has a shape the schema cannot express
- ContractError: A wrapper or resource type breaks the conventions it claims to follow
- DeclarationError: Field tags, locators, tokens or annotate hooks are wrong

These are build-time diagnostics for the author of the type definitions.
Field collection records them instead of raising, so one pass reports every
defect; see SchemaInferenceErrorGroup.
"""

from collections.abc import Sequence


class InferenceError(Exception):
    """Base class for all provinfer errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Type shape errors
# =============================================================================


class TypeShapeError(InferenceError):
    """Base class for type graph shape problems."""


class UnsupportedKindError(TypeShapeError):
    """A type has no schema representation."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"unknown type: '{kind}'")
        self.kind = kind


class MapKeyError(TypeShapeError):
    """A mapping uses a non-string key type."""

    def __init__(self, key: str) -> None:
        super().__init__(f"map keys must be strings, found {key}")
        self.key = key


class UnterminatedRecursionError(TypeShapeError):
    """A type refers back to itself without ever being assigned a token."""


# =============================================================================
# Contract errors
# =============================================================================


class ContractError(InferenceError):
    """Base class for broken wrapper and resource conventions."""


class InputContractError(ContractError):
    """An input wrapper does not follow the FooInput / to_foo_output convention."""


class OutputContractError(ContractError):
    """An input's conversion method does not return a usable output wrapper."""


# =============================================================================
# Declaration errors
# =============================================================================


class DeclarationError(InferenceError):
    """Base class for mistakes in tags, locators and tokens."""


class TagParseError(DeclarationError):
    """Field tag text could not be parsed."""

    def __init__(self, message: str, tag: str | None = None) -> None:
        super().__init__(message)
        self.tag = tag


class MissingExternalTypeError(DeclarationError):
    """A foreign resource field has no type= locator."""


class MalformedExternalTypeError(DeclarationError):
    """A type= locator is not of the form package@version:module:name."""


class TokenResolutionError(DeclarationError):
    """A token could not be derived, parsed, or is claimed by two types."""


class AnnotationError(DeclarationError):
    """A type's annotate hook failed."""


# =============================================================================
# Aggregation
# =============================================================================


class SchemaInferenceErrorGroup(ExceptionGroup):
    """Every diagnostic produced while inferring one schema."""

    def __new__(cls, message: str, errors: Sequence[InferenceError]):
        return super().__new__(cls, message, list(errors))

    def derive(self, excs):
        return SchemaInferenceErrorGroup(self.message, excs)

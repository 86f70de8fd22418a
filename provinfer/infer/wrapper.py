"""Unwrapping of input and output wrapper types."""

from __future__ import annotations

import logging
import re
import typing
from typing import Any, get_args, get_origin

from provinfer.capability import InputLike, OutputLike, implements, zero_value
from provinfer.errors import InputContractError, OutputContractError
from provinfer.introspect import strip_indirection, type_name

logger = logging.getLogger(__name__)

INPUT_SUFFIX = "Input"

_ACRONYM_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_RE = re.compile(r"([a-z0-9])([A-Z])")


def snake_case(name: str) -> str:
    """``StringArray`` -> ``string_array``, ``URLMap`` -> ``url_map``."""
    return _CAMEL_RE.sub(r"\1_\2", _ACRONYM_RE.sub(r"\1_\2", name)).lower()


def conversion_method(input_name: str) -> str:
    """Name of the method converting ``input_name`` to its output."""
    stem = snake_case(input_name.removesuffix(INPUT_SUFFIX))
    return f"to_{stem}_output" if stem else "to_output"


def _output_element(t: Any) -> tuple[Any, bool]:
    """Element type of ``t`` if ``t`` is an output wrapper.

    A parameterised generic such as ``Output[str]`` is read statically; a
    class is probed through an uninitialised instance.
    """
    origin = get_origin(t)
    if origin is not None:
        if implements(origin, OutputLike):
            args = get_args(t)
            return (args[0] if args else Any), True
        return None, False

    instance = zero_value(t)
    if isinstance(instance, OutputLike):
        return instance.element_type(), True
    return None, False


def _input_element(t: type) -> Any:
    name = t.__name__
    if not name.endswith(INPUT_SUFFIX):
        raise InputContractError(f'{name} is an input type, but does not end in "{INPUT_SUFFIX}"')

    method_name = conversion_method(name)
    method = getattr(t, method_name, None)
    if not callable(method):
        raise InputContractError(f"{name} is an input type, but does not have a {method_name} method")

    try:
        returns = typing.get_type_hints(method).get("return")
    except NameError as e:
        raise OutputContractError(
            f"cannot resolve the return type of {name}.{method_name}: {e}"
        ) from e
    if returns is None:
        raise OutputContractError(f"{name}.{method_name} has no return annotation")

    returns = strip_indirection(returns)
    element, is_output = _output_element(returns)
    if not is_output:
        raise OutputContractError(
            f"return type {type_name(returns)} of method {method_name} on type {name} "
            "does not implement Output"
        )
    return element


def underlying_type(t: Any) -> tuple[Any, bool]:
    """Strip indirection and wrappers off ``t``.

    Returns the carried type and whether ``t`` was an input or output
    wrapper. Resolving the result again returns it unchanged with False.
    """
    t = strip_indirection(t)

    element, wrapped = _output_element(t)
    if not wrapped:
        origin = get_origin(t)
        if origin is not None and implements(origin, InputLike):
            args = get_args(t)
            element, wrapped = (args[0] if args else Any), True
        elif origin is None and implements(t, InputLike):
            element, wrapped = _input_element(t), True

    if not wrapped:
        return t, False

    element = strip_indirection(element)
    logger.debug("Unwrapped %s to %s", type_name(t), type_name(element))
    return element, True

"""Input and output wrapper types.

An ``Output[T]`` carries a value of type ``T`` that is only known once the
engine has resolved it. An input wrapper (``StringInput`` and friends) is
anything that can be turned into the matching output; by convention a
``FooInput`` converts with ``to_foo_output()``.

Schema inference unwraps both kinds back to ``T``.
"""

from collections.abc import Callable
from typing import Any, ClassVar, Generic, TypeVar, get_args, get_origin

T = TypeVar("T")
U = TypeVar("U")


def _captured_element(cls: type, origin: type) -> Any | None:
    """Find ``T`` in ``class Foo(origin[T])``."""
    for base in cls.__dict__.get("__orig_bases__", ()):
        if get_origin(base) is origin:
            args = get_args(base)
            if args and not isinstance(args[0], TypeVar):
                return args[0]
    return None


class Output(Generic[T]):
    """A deferred value of type ``T``."""

    __element__: ClassVar[Any] = Any

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        element = _captured_element(cls, Output)
        if element is not None:
            cls.__element__ = element

    def __init__(self, value: T | None = None) -> None:
        self._value = value

    def element_type(self) -> Any:
        return type(self).__element__

    def apply(self, fn: Callable[[T], U]) -> "Output[U]":
        return Output(fn(self._value))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class Input(Generic[T]):
    """A plain value that can be lifted into an output."""

    __element__: ClassVar[Any] = Any

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        element = _captured_element(cls, Input)
        if element is not None:
            cls.__element__ = element

    def __init__(self, value: T) -> None:
        self.value = value

    def element_type(self) -> Any:
        return type(self).__element__


class StringOutput(Output[str]): ...


class IntOutput(Output[int]): ...


class FloatOutput(Output[float]): ...


class BoolOutput(Output[bool]): ...


class StringInput(Input[str]):
    def to_string_output(self) -> StringOutput:
        return StringOutput(self.value)


class IntInput(Input[int]):
    def to_int_output(self) -> IntOutput:
        return IntOutput(self.value)


class FloatInput(Input[float]):
    def to_float_output(self) -> FloatOutput:
        return FloatOutput(self.value)


class BoolInput(Input[bool]):
    def to_bool_output(self) -> BoolOutput:
        return BoolOutput(self.value)

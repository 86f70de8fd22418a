"""Global test fixtures."""

import logging
from collections.abc import Iterator

import pytest

from provinfer.infer import FieldCollector, SchemaAssembler, TokenResolver, TypeWalker
from provinfer.registry import TokenRegistry


@pytest.fixture
def registry() -> TokenRegistry:
    return TokenRegistry("test")


@pytest.fixture
def resolver(registry: TokenRegistry) -> TokenResolver:
    return TokenResolver(registry)


@pytest.fixture
def walker(resolver: TokenResolver) -> TypeWalker:
    return TypeWalker(resolver)


@pytest.fixture
def collector(walker: TypeWalker) -> FieldCollector:
    return FieldCollector(walker)


@pytest.fixture
def assembler(registry: TokenRegistry) -> SchemaAssembler:
    return SchemaAssembler.create(registry)


@pytest.fixture
def root_logger() -> Iterator[logging.Logger]:
    """Drop the handlers configure_logging installs and restore the root level."""
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in root.handlers[:]:
        # pytest's own capture handlers are subclasses; leave those alone
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)

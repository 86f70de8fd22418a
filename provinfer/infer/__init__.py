"""Schema inference engine."""

from provinfer.infer.assembler import SchemaAssembler
from provinfer.infer.fields import FieldCollector, PropertyList
from provinfer.infer.package import build_package_schema
from provinfer.infer.reference import Classification, TokenResolver
from provinfer.infer.walker import TypeWalker
from provinfer.infer.wrapper import underlying_type

__all__ = [
    "Classification",
    "FieldCollector",
    "PropertyList",
    "SchemaAssembler",
    "TokenResolver",
    "TypeWalker",
    "build_package_schema",
    "underlying_type",
]

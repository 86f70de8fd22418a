"""Package schema: every declaration of a provider plus the types they reference."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from provinfer.capability import SelfDescribing, implements
from provinfer.errors import InferenceError
from provinfer.infer.assembler import SchemaAssembler
from provinfer.infer.reference import TokenResolver, is_enum
from provinfer.introspect import type_name
from provinfer.provider import DeclarationKind
from provinfer.registry import TokenRegistry, derive_token
from provinfer.schema import InferenceResult, PackageSchema
from provinfer.token import Token

if TYPE_CHECKING:
    from provinfer.provider import Declaration, Provider

logger = logging.getLogger(__name__)


def declaration_token(decl: Declaration, resolver: TokenResolver) -> Token:
    """Token a declaration is published under."""
    if implements(decl.controller, SelfDescribing):
        return resolver.resource_token(decl.controller)
    return derive_token(decl.controller, resolver.registry.package)


def build_package_schema(
    provider: Provider,
    *,
    package: str | None = None,
    allow_missing_external_types: bool = False,
) -> InferenceResult[PackageSchema]:
    """Infer the full package schema of ``provider``.

    Resources and functions are assembled first; then every object and enum
    type they referenced is described, including the types those reference
    in turn. Each token is described once, which is what ends cycles.
    """
    registry = TokenRegistry(package or provider.name)
    assembler = SchemaAssembler.create(
        registry, allow_missing_external_types=allow_missing_external_types
    )
    resolver = assembler.collector.walker.resolver

    schema = PackageSchema(
        name=registry.package,
        version=provider.version,
        description=provider.description,
    )
    errors: list[InferenceError] = []

    for decl in [*provider.resources, *provider.functions]:
        try:
            token = str(declaration_token(decl, resolver))
        except InferenceError as e:
            e.add_note(f"could not derive the token of {decl.kind} {type_name(decl.controller)}")
            errors.append(e)
            continue

        if decl.kind is DeclarationKind.FUNCTION:
            found = assembler.function(decl.controller, decl.inputs, decl.outputs)
            schema.functions[token] = found.schema
        else:
            found = assembler.resource(
                decl.controller, decl.inputs, decl.outputs, is_component=decl.is_component
            )
            schema.resources[token] = found.schema
        errors.extend(found.errors)

    described: set[Token] = set()
    while pending := [tk for tk in registry.tokens() if tk not in described]:
        for token in pending:
            described.add(token)
            t = registry.resolve(token)
            typed = assembler.enum_type(t) if is_enum(t) else assembler.object_type(t)
            schema.types[str(token)] = typed.schema
            errors.extend(typed.errors)

    logger.info(
        "Built schema for %s: %d resources, %d functions, %d types, %d errors",
        schema.name,
        len(schema.resources),
        len(schema.functions),
        len(schema.types),
        len(errors),
    )
    return InferenceResult(schema, errors)

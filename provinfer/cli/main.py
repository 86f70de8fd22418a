"""Main CLI application using Cyclopts.

Loads a Provider from ``module:attribute`` and publishes or checks its
inferred package schema.
"""

import importlib
import json
import sys
from pathlib import Path

import cyclopts

from provinfer.cli.console import Console
from provinfer.config import Config, configure_logging
from provinfer.provider import Provider
from provinfer.schema import InferenceResult, PackageSchema

app = cyclopts.App(
    name="provinfer",
    help="Infer provider package schemas from annotated Python types",
)


def load_provider(target: str) -> Provider:
    """Import ``module:attribute`` and return the Provider it names.

    The attribute may also be a zero-argument callable returning one.
    """
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"expected module:attribute, got {target!r}")

    obj = getattr(importlib.import_module(module_name), attr)
    if callable(obj) and not isinstance(obj, Provider):
        obj = obj()
    if not isinstance(obj, Provider):
        raise TypeError(f"{target} is a {type(obj).__name__}, not a Provider")
    return obj


def _infer(
    target: str, package: str | None, config: Config, console: Console
) -> InferenceResult[PackageSchema]:
    configure_logging(config.logging)
    try:
        provider = load_provider(target)
    except (ImportError, AttributeError, TypeError, ValueError) as e:
        console.error(f"Cannot load provider: {e}", hint="Pass the provider as module:attribute")
        sys.exit(2)
    return provider.schema(
        package=package or config.package,
        allow_missing_external_types=config.allow_missing_external_types,
    )


def _report(result: InferenceResult[PackageSchema], console: Console) -> None:
    if result.errors:
        console.diagnostics(result.errors, title=f"{len(result.errors)} schema errors")
        sys.exit(1)


@app.command
def schema(
    target: str,
    /,
    *,
    out: Path | None = None,
    package: str | None = None,
    quiet: bool = False,
) -> None:
    """Print or write the package schema of a provider.

    Args:
        target: Provider location as module:attribute.
        out: Write the schema to this file instead of stdout.
        package: Publish under this package name.
        quiet: Suppress status messages.
    """
    config = Config()
    console = Console(quiet=quiet)
    result = _infer(target, package, config, console)

    document = json.dumps(result.schema.to_schema(), indent=config.schema_indent or None)
    if out is None:
        console.document(document)
    else:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(document + "\n")
        console.info(f"Wrote {out}")

    _report(result, console)


@app.command
def check(target: str, /, *, package: str | None = None) -> None:
    """Report schema errors of a provider without printing the schema.

    Args:
        target: Provider location as module:attribute.
        package: Publish under this package name.
    """
    console = Console()
    result = _infer(target, package, Config(), console)
    _report(result, console)
    console.success(
        f"{result.schema.name}: {len(result.schema.resources)} resources, "
        f"{len(result.schema.functions)} functions, {len(result.schema.types)} types"
    )

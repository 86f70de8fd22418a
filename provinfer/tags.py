"""Per-field tags: exposed name plus schema flags.

A tag is written as comma separated text. The first element is the name the
field is published under (empty keeps the attribute name); the rest are
flags::

    class BucketArgs(Schema):
        name: Annotated[str, Tag("bucketName,replaceOnChanges")]
        token: str = Field(tag="apiToken,secret,optional", default="")
        owner: Annotated[Account, Tag(",type=aws@6.0.0:iam:User")]
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _PydanticField
from pydantic.fields import FieldInfo

from provinfer.errors import TagParseError

TAG_KEY = "provider"

# tag flag -> FieldTag attribute
_FLAGS: dict[str, str] = {
    "optional": "optional",
    "secret": "secret",
    "replaceOnChanges": "replace_on_changes",
    "internal": "internal",
}

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class Tag:
    """Tag marker for ``Annotated[T, Tag("...")]``."""

    text: str


class FieldTag(BaseModel):
    """Parsed field tag."""

    model_config = ConfigDict(frozen=True)

    name: str
    optional: bool = False
    secret: bool = False
    replace_on_changes: bool = False
    internal: bool = False
    external_type: str = ""


def parse_tag(text: str | None, default_name: str) -> FieldTag:
    """Parse tag text for a field whose attribute name is ``default_name``."""
    if text is None:
        return FieldTag(name=default_name)

    head, *options = text.split(",")
    name = head.strip() or default_name
    if not _NAME_RE.match(name):
        raise TagParseError(f"invalid field name {name!r} in tag {text!r}", tag=text)

    values: dict[str, Any] = {}
    for raw in options:
        option = raw.strip()
        if not option:
            raise TagParseError(f"empty option in tag {text!r}", tag=text)

        if option.startswith("type="):
            locator = option.removeprefix("type=").strip()
            if not locator:
                raise TagParseError(f"type= needs a value in tag {text!r}", tag=text)
            key, value = "external_type", locator
        elif option in _FLAGS:
            key, value = _FLAGS[option], True
        else:
            raise TagParseError(f"unknown tag option {option!r} in {text!r}", tag=text)

        if key in values:
            raise TagParseError(f"duplicate option {option!r} in tag {text!r}", tag=text)
        values[key] = value

    return FieldTag(name=name, **values)


def find_tag_text(metadata: Iterable[Any], extra: Mapping[str, Any] | None = None) -> str | None:
    """Pick the tag text out of a field's metadata.

    ``metadata`` is the ``Annotated`` extras of the field; ``extra`` is the
    pydantic ``json_schema_extra`` or the dataclass field metadata.
    """
    texts = [m.text for m in metadata if isinstance(m, Tag)]
    if extra and TAG_KEY in extra:
        texts.append(str(extra[TAG_KEY]))
    if len(texts) > 1:
        raise TagParseError(f"field carries {len(texts)} tags, expected one: {texts!r}")
    return texts[0] if texts else None


def Field(
    *,
    tag: str | None = None,
    optional: bool = False,
    secret: bool = False,
    replace_on_changes: bool = False,
    internal: bool = False,
    type: str | None = None,
    **kwargs: Any,
) -> FieldInfo:
    """Declare a schema field with a provider tag.

    Thin wrapper around :func:`pydantic.Field`. The tag text and any flags
    given as keywords are stored in ``json_schema_extra``. A keyword flag
    already spelled out in ``tag`` is not repeated; an external type given
    both ways is rejected.
    """
    present = {o.strip() for o in (tag or "").split(",")[1:]}
    options = [
        flag
        for flag, enabled in (
            ("optional", optional),
            ("secret", secret),
            ("replaceOnChanges", replace_on_changes),
            ("internal", internal),
        )
        if enabled and flag not in present
    ]
    if type is not None:
        if any(o.startswith("type=") for o in present):
            raise TagParseError(
                f"tag {tag!r} already names an external type; drop type={type!r}", tag=tag
            )
        options.append(f"type={type}")

    extra: dict[str, Any] = kwargs.pop("json_schema_extra", None) or {}
    if tag is not None or options:
        extra[TAG_KEY] = ",".join([tag or "", *options])
    if extra:
        kwargs["json_schema_extra"] = extra
    return _PydanticField(**kwargs)

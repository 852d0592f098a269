"""
Typed tag values and the raw-string value parser.

A tag value is exactly one of four kinds, modelled as a closed pydantic
discriminated union so stored values round-trip through every codec and
downstream code can ``match`` on the concrete class::

    parse_value("42")                  # IntValue(value=42)
    parse_value("true")                # BoolValue(value=True)
    parse_value("https://example.com") # UrlValue(value="https://example.com")
    parse_value("hello world")         # StringValue(value="hello world")

Parsing tries each kind in a fixed order and the first full-string match
wins; ``StringValue`` always matches, so ``parse_value`` never fails.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Annotated, Literal

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from fsmeta.core.constants import INVALID_TAG_CHARS
from fsmeta.core.exceptions import InvalidTagKey, InvalidTagValue

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INT_RE = re.compile(r"-?[0-9]+")
_URL_ADAPTER: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)


# ---------------------------------------------------------------------------
# Value kinds
# ---------------------------------------------------------------------------


class _Value(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    def __str__(self) -> str:
        return str(self.value)  # type: ignore[attr-defined]


class IntValue(_Value):
    type: Literal["int"] = "int"
    value: Annotated[StrictInt, Field(ge=INT64_MIN, le=INT64_MAX)]


class BoolValue(_Value):
    type: Literal["bool"] = "bool"
    value: StrictBool

    def __str__(self) -> str:
        return "true" if self.value else "false"


class UrlValue(_Value):
    type: Literal["url"] = "url"
    value: StrictStr

    @field_validator("value")
    @classmethod
    def must_be_url(cls, v: str) -> str:
        if not is_url(v):
            raise ValueError(f"not a valid absolute URL: {v!r}")
        return v


class StringValue(_Value):
    type: Literal["string"] = "string"
    value: StrictStr


TypedValue = Annotated[
    IntValue | BoolValue | UrlValue | StringValue,
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def is_int64(raw: str) -> bool:
    if not _INT_RE.fullmatch(raw):
        return False
    return INT64_MIN <= int(raw) <= INT64_MAX


def is_bool(raw: str) -> bool:
    return raw in ("true", "false")


def is_url(raw: str) -> bool:
    """True when *raw*, taken whole, is an absolute URL with a scheme."""
    # The URL parser trims and percent-encodes whitespace; a tag value that
    # needs either is not a URL as typed.
    if not raw or any(ch.isspace() or not ch.isprintable() for ch in raw):
        return False
    try:
        _URL_ADAPTER.validate_python(raw)
    except ValidationError:
        return False
    return True


# Evaluated in order; the first matching predicate builds the value.
_PARSERS: tuple[tuple[Callable[[str], bool], Callable[[str], _Value]], ...] = (
    (is_int64, lambda raw: IntValue(value=int(raw))),
    (is_bool, lambda raw: BoolValue(value=raw == "true")),
    (is_url, lambda raw: UrlValue(value=raw)),
    (lambda raw: True, lambda raw: StringValue(value=raw)),
)


def parse_value(raw: str) -> IntValue | BoolValue | UrlValue | StringValue:
    """Convert *raw* into the first typed value whose full-string parse succeeds."""
    for matches, build in _PARSERS:
        if matches(raw):
            return build(raw)  # type: ignore[return-value]
    raise AssertionError("unreachable: string fallback always matches")


def kind_of(value: object) -> str:
    """Human label for a stored tag value (``none`` for a flag tag)."""
    if value is None:
        return "none"
    return getattr(value, "type", type(value).__name__)


# ---------------------------------------------------------------------------
# Tag keys and CLI tag specs
# ---------------------------------------------------------------------------


def validate_tag_key(key: str) -> str:
    if not key:
        raise InvalidTagKey("tag name is empty")
    for ch in key:
        if ch.isspace() or not ch.isprintable() or ch in INVALID_TAG_CHARS:
            raise InvalidTagKey(f"tag name {key!r} contains an invalid character: {ch!r}")
    return key


def parse_tag_spec(spec: str) -> tuple[str, str | None]:
    """
    Split a ``key[:value]`` argument.

    ``"count:10"`` → ``("count", "10")``; ``"draft"`` and ``"draft:"`` both
    give a flag tag ``("draft", None)``. Only the first ``:`` separates, so
    ``"site:https://x"`` keeps the URL intact.
    """
    key, sep, value = spec.partition(":")
    validate_tag_key(key)
    if not sep or not value:
        return key, None
    return key, value


def parse_url_tag_spec(spec: str) -> tuple[str, str]:
    """Like :func:`parse_tag_spec`, but the value is required and must be a URL."""
    key, value = parse_tag_spec(spec)
    if value is None or not is_url(value):
        raise InvalidTagValue(f"tag {key!r}: {value or ''!r} is not a valid URL")
    return key, value


def parse_int_tag_spec(spec: str) -> tuple[str, str]:
    """Like :func:`parse_tag_spec`, but the value is required and must be a 64-bit integer."""
    key, value = parse_tag_spec(spec)
    if value is None or not is_int64(value):
        raise InvalidTagValue(f"tag {key!r}: {value or ''!r} is not a 64-bit integer")
    return key, value

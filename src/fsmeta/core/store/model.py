"""Repository state: pydantic models shared by every storage format."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fsmeta.core.constants import StorageFormat
from fsmeta.core.exceptions import InvalidTagKey
from fsmeta.core.values import TypedValue, validate_tag_key

SCHEMA_VERSION = 1


def utcnow() -> datetime:
    return datetime.now(UTC)


class Entry(BaseModel):
    """Tags and comment for one path (or for the repository itself)."""

    model_config = ConfigDict(extra="forbid")

    tags: dict[str, TypedValue | None] = Field(default_factory=dict)
    comment: str | None = None
    created: datetime = Field(default_factory=utcnow)
    updated: datetime | None = None

    @field_validator("tags")
    @classmethod
    def check_keys(cls, v: dict[str, object]) -> dict[str, object]:
        for key in v:
            try:
                validate_tag_key(key)
            except InvalidTagKey as exc:
                raise ValueError(str(exc)) from exc
        return v

    @property
    def is_empty(self) -> bool:
        return not self.tags and self.comment is None

    @property
    def modified(self) -> datetime:
        return self.updated or self.created

    def touch(self) -> None:
        self.updated = utcnow()


class Repository(BaseModel):
    """
    Complete persisted state of one root.

    ``format`` is the marker written at init time; ``root`` holds the tags
    and comment attached to the repository itself rather than to a path.
    """

    model_config = ConfigDict(extra="forbid")

    version: int = SCHEMA_VERSION
    format: StorageFormat
    entries: dict[str, Entry] = Field(default_factory=dict)
    collections: dict[str, list[str]] = Field(default_factory=dict)
    root: Entry = Field(default_factory=Entry)
    created: datetime = Field(default_factory=utcnow)
    updated: datetime | None = None

    @field_validator("version")
    @classmethod
    def known_version(cls, v: int) -> int:
        if v != SCHEMA_VERSION:
            raise ValueError(f"unsupported schema version {v} (expected {SCHEMA_VERSION})")
        return v

    @field_validator("collections")
    @classmethod
    def members_unique(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        for name, members in v.items():
            if len(set(members)) != len(members):
                raise ValueError(f"collection {name!r} has duplicate members")
        return v

    @classmethod
    def empty(cls, fmt: StorageFormat) -> Repository:
        return cls(format=fmt)

    def touch(self) -> None:
        self.updated = utcnow()

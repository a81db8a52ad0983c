"""Term contracts: glossary entries, drafts, and their audit records.

This module defines three Pydantic v2 models:

- `EditRecord`: one historical modification (who, which day).
- `TermDraft` : the caller-editable fields of a term, used to create one.
- `Term`      : the stored aggregate, adding the repository-owned `id`,
  the write-once creation stamp and the append-only `history`.

Serialization
-------------
Python attributes are snake_case; the persisted JSON uses camelCase keys
(`imageUrl`, `createdBy`, `editedAt`, ...) through an alias generator. Use
`term.model_dump(mode="json", by_alias=True, exclude_none=True)` to produce
the stored shape and `Term.model_validate(payload)` to read it back.

Notes
-----
- All models are frozen. A stored term changes only by being replaced in the
  repository with a new instance.
- Date stamps are plain `YYYY-MM-DD` strings (UTC calendar date).
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, date, datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .category import Category, is_valid_category_set

# ---- Shared small types ------------------------------------------------------


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value


def _calendar_date(value: str) -> str:
    date.fromisoformat(value)
    return value


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]
DateStamp = Annotated[
    str,
    Field(pattern=r"^\d{4}-\d{2}-\d{2}$", description="Calendar date, YYYY-MM-DD."),
    AfterValidator(_calendar_date),
]

EDITABLE_FIELDS: tuple[str, ...] = (
    "term",
    "reading",
    "alias",
    "english",
    "meaning",
    "categories",
    "image_url",
)


def current_date() -> str:
    """Return today's UTC date as `YYYY-MM-DD`."""
    return datetime.now(UTC).strftime("%Y-%m-%d")


class _Contract(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class EditRecord(_Contract):
    """One modification event in a term's audit trail."""

    edited_by: NonBlankStr
    edited_at: DateStamp


class TermDraft(_Contract):
    """Caller-supplied content of a term, without any repository-owned field."""

    term: NonBlankStr
    reading: NonBlankStr
    alias: str | None = None
    english: NonBlankStr
    meaning: NonBlankStr
    categories: tuple[Category, ...]
    image_url: str | None = Field(
        default=None, description="Remote URL or embedded `data:` URI of a reference image."
    )

    @field_validator("alias", "image_url")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        """Form inputs send empty strings for 'no value'; store them as absent."""
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("categories")
    @classmethod
    def _non_empty_unique(cls, v: tuple[Category, ...]) -> tuple[Category, ...]:
        if not is_valid_category_set(v):
            raise ValueError("at least one category is required")
        return tuple(dict.fromkeys(v))


class Term(TermDraft):
    """A stored glossary entry."""

    id: int = Field(ge=1)
    created_by: str | None = None
    created_at: DateStamp | None = None
    history: tuple[EditRecord, ...] = ()

    def draft(self) -> TermDraft:
        """Return the editable part of this term as a `TermDraft`."""
        return TermDraft.model_validate(self.model_dump(include=set(EDITABLE_FIELDS)))

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-safe, camelCase form stored by the persistence layer."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def new_term(draft: TermDraft, *, term_id: int, operator_name: str, today: str) -> Term:
    """Build a freshly created term: no history, creation stamp set once."""
    return Term.model_validate(
        {
            **draft.model_dump(),
            "id": term_id,
            "created_by": operator_name,
            "created_at": today,
            "history": (),
        }
    )


def merge_changes(term: Term, changes: Mapping[str, Any]) -> Term:
    """Return a validated copy of ``term`` with editable ``changes`` applied.

    Keys may be given in snake_case or in their camelCase alias.
    """
    data = term.model_dump()
    for key, value in changes.items():
        data[field_name(key)] = value
    return Term.model_validate(data)


def field_name(key: str) -> str:
    """Map a camelCase alias (``imageUrl``) to its field name (``image_url``)."""
    for name, info in Term.model_fields.items():
        if key in (name, info.alias):
            return name
    return key


__all__ = [
    "DateStamp",
    "EDITABLE_FIELDS",
    "EditRecord",
    "NonBlankStr",
    "Term",
    "TermDraft",
    "current_date",
    "field_name",
    "merge_changes",
    "new_term",
]

"""Unit tests for the term contracts and category helpers."""

from __future__ import annotations

import pydantic
import pytest

from crascad.core.contracts.category import Category, is_valid_category_set, toggle_category
from crascad.core.contracts.term import (
    EditRecord,
    Term,
    TermDraft,
    current_date,
    merge_changes,
    new_term,
)


def _draft(**overrides: object) -> TermDraft:
    data: dict[str, object] = {
        "term": "ゲート",
        "reading": "げーと",
        "english": "Gate",
        "meaning": "Resin inlet into the cavity.",
        "categories": [Category.RESIN_MOLD],
    }
    data.update(overrides)
    return TermDraft.model_validate(data)


def test_category_set_has_exactly_seven_members() -> None:
    """The category enumeration is closed."""
    assert len(Category) == 7
    assert Category("一般") is Category.GENERAL


def test_is_valid_category_set() -> None:
    assert is_valid_category_set([Category.OTHER])
    assert not is_valid_category_set([])
    assert not is_valid_category_set(())


def test_toggle_category_adds_and_removes() -> None:
    cats = (Category.GENERAL,)
    cats = toggle_category(cats, Category.OTHER)
    assert cats == (Category.GENERAL, Category.OTHER)
    assert toggle_category(cats, Category.GENERAL) == (Category.OTHER,)


def test_toggle_category_never_removes_the_last_one() -> None:
    """Removing the only category is a no-op."""
    cats = (Category.DESIGN_SPECIALIZED,)
    assert toggle_category(cats, Category.DESIGN_SPECIALIZED) == cats


@pytest.mark.parametrize("field", ["term", "reading", "english", "meaning"])
def test_required_text_fields_reject_blank(field: str) -> None:
    with pytest.raises(pydantic.ValidationError):
        _draft(**{field: "   "})


def test_empty_categories_rejected() -> None:
    with pytest.raises(pydantic.ValidationError):
        _draft(categories=[])


def test_categories_deduplicated_in_order() -> None:
    draft = _draft(categories=["樹脂金型", Category.GENERAL, Category.RESIN_MOLD])
    assert draft.categories == (Category.RESIN_MOLD, Category.GENERAL)


def test_blank_optional_fields_become_none() -> None:
    """Empty form inputs for alias/image are stored as absent."""
    draft = _draft(alias="", image_url="  ")
    assert draft.alias is None
    assert draft.image_url is None


def test_new_term_stamps_creation_and_empty_history() -> None:
    term = new_term(_draft(), term_id=3, operator_name="alice", today="2025-03-01")
    assert term.id == 3
    assert term.created_by == "alice"
    assert term.created_at == "2025-03-01"
    assert term.history == ()


def test_payload_uses_camel_case_and_round_trips() -> None:
    term = Term.model_validate(
        {
            **_draft(alias="湯口", image_url="https://example.com/gate.png").model_dump(),
            "id": 7,
            "created_by": "alice",
            "created_at": "2025-03-01",
            "history": [EditRecord(edited_by="bob", edited_at="2025-03-02")],
        }
    )
    payload = term.to_payload()

    assert payload["imageUrl"] == "https://example.com/gate.png"
    assert payload["createdBy"] == "alice"
    assert payload["history"] == [{"editedBy": "bob", "editedAt": "2025-03-02"}]
    assert payload["categories"] == ["樹脂金型"]
    assert Term.model_validate(payload) == term


def test_absent_optionals_are_omitted_from_payload() -> None:
    term = new_term(_draft(), term_id=1, operator_name="alice", today="2025-03-01")
    payload = term.to_payload()
    assert "alias" not in payload
    assert "imageUrl" not in payload


def test_terms_are_immutable() -> None:
    term = new_term(_draft(), term_id=1, operator_name="alice", today="2025-03-01")
    with pytest.raises(pydantic.ValidationError):
        term.id = 2  # type: ignore[misc]


def test_date_stamp_format_enforced() -> None:
    with pytest.raises(pydantic.ValidationError):
        EditRecord(edited_by="bob", edited_at="03/02/2025")


def test_merge_changes_accepts_aliases() -> None:
    term = new_term(_draft(), term_id=1, operator_name="alice", today="2025-03-01")
    merged = merge_changes(term, {"imageUrl": "https://example.com/x.png", "meaning": "New"})
    assert merged.image_url == "https://example.com/x.png"
    assert merged.meaning == "New"
    assert merged.created_by == "alice"


def test_draft_extracts_editable_fields() -> None:
    term = new_term(_draft(alias="湯口"), term_id=1, operator_name="alice", today="2025-03-01")
    assert term.draft() == _draft(alias="湯口")


def test_current_date_format() -> None:
    today = current_date()
    assert len(today) == 10 and today[4] == "-" and today[7] == "-"


@pytest.mark.parametrize("stamp", ["2024-13-45", "2025-02-30", "2025-00-10"])
def test_date_stamp_rejects_impossible_dates(stamp: str) -> None:
    """Well-shaped but non-existent calendar dates are rejected."""
    with pytest.raises(pydantic.ValidationError):
        EditRecord(edited_by="bob", edited_at=stamp)


def test_date_stamp_accepts_leap_day() -> None:
    assert EditRecord(edited_by="bob", edited_at="2024-02-29").edited_at == "2024-02-29"

"""Scenario tests for the glossary session facade."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from crascad.core.contracts.category import Category
from crascad.core.errors import GlossaryError, TermNotVisibleError
from crascad.core.query import ALL
from crascad.core.session import GlossarySession
from crascad.core.store.backends import MemoryStore
from crascad.core.store.seed import seed_terms

TODAY = "2025-06-15"


class FailingWriteStore(MemoryStore):
    def set(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")


def _session(store: MemoryStore | None = None) -> GlossarySession:
    return GlossarySession.open(store if store is not None else MemoryStore(), today=lambda: TODAY)


def _draft(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "term": "Test",
        "reading": "てすと",
        "english": "Test",
        "meaning": "X",
        "categories": [Category.GENERAL],
    }
    data.update(overrides)
    return data


def test_open_on_empty_store_shows_seed_and_selects_first() -> None:
    session = _session()
    seed = seed_terms()

    assert session.filtered == tuple(seed)
    assert session.total_count == len(seed)
    assert session.active == seed[0]
    assert session.category_filter == ALL
    assert session.search_text == ""


def test_single_category_filter_auto_selects_only_match() -> None:
    session = _session()
    result = session.set_category_filter(Category.DESIGN_SPECIALIZED)

    assert len(result) == 1
    assert session.active == result[0]
    assert session.total_count == len(seed_terms())


def test_search_with_no_match_clears_selection() -> None:
    session = _session()
    assert session.set_search_text("zzz-nothing") == ()
    assert session.active is None

    session.set_search_text("")
    assert session.active == session.filtered[0]


def test_selection_survives_filter_when_still_visible() -> None:
    session = _session()
    gate = next(t for t in session.filtered if t.term == "ゲート")
    session.select(gate)

    session.set_category_filter(Category.RESIN_MOLD)
    assert session.active == gate


def test_select_rejects_hidden_term() -> None:
    session = _session()
    session.set_category_filter(Category.DESIGN_SPECIALIZED)
    hidden = seed_terms()[0]
    with pytest.raises(TermNotVisibleError) as excinfo:
        session.select(hidden)
    assert excinfo.value.term_id == hidden.id
    assert isinstance(excinfo.value, GlossaryError)
    assert session.active is not None and session.active.term == "公差"


def test_create_selects_new_term_and_lists_it_first() -> None:
    session = _session()
    created = session.create(_draft(), "alice")

    assert created.id == 10
    assert session.filtered[0] == created
    assert session.active == created
    assert session.category_counts[Category.GENERAL] == 3


def test_create_hidden_by_filter_falls_back_to_first_visible() -> None:
    session = _session()
    session.set_category_filter(Category.DESIGN_SPECIALIZED)
    session.create(_draft(), "alice")

    assert session.active is not None
    assert session.active.term == "公差"


def test_update_refreshes_active_term() -> None:
    session = _session()
    active = session.active
    assert active is not None

    updated = session.update(active.model_copy(update={"meaning": "Revised"}), "bob")

    assert session.active == updated
    assert session.active is not None and session.active.meaning == "Revised"
    assert len(updated.history) == 1


def test_edit_can_move_term_out_of_filter() -> None:
    session = _session()
    session.set_category_filter(Category.DESIGN_SPECIALIZED)
    term = session.filtered[0]

    session.edit(term.id, {"categories": [Category.OTHER]}, "bob")

    assert session.filtered == ()
    assert session.active is None


def test_delete_selected_term_moves_selection_to_first_remaining() -> None:
    session = _session()
    first = session.filtered[0]

    session.delete(first.id)

    assert all(t.id != first.id for t in session.filtered)
    assert session.active == session.filtered[0]
    assert session.total_count == len(seed_terms()) - 1


def test_delete_other_term_keeps_selection() -> None:
    session = _session()
    chosen = session.filtered[3]
    session.select(chosen)

    session.delete(session.filtered[0].id)
    assert session.active == chosen


def test_write_failure_surfaces_as_warning() -> None:
    session = _session(FailingWriteStore())
    created = session.create(_draft(), "alice")

    assert session.write_warning is not None
    assert session.active == created


def test_state_survives_reopen(tmp_path: Path) -> None:
    session = GlossarySession.open(data_dir=tmp_path, key="terms", today=lambda: TODAY)
    created = session.create(_draft(term="金型"), "alice")

    reopened = GlossarySession.open(data_dir=tmp_path, key="terms")
    assert reopened.filtered[0] == created
    assert reopened.total_count == len(seed_terms()) + 1

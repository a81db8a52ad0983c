"""Unit tests for the term repository: CRUD, id allocation and audit trail."""

from __future__ import annotations

import random
from pathlib import Path
from typing import Any

import pytest

from crascad.core.contracts.category import Category, toggle_category
from crascad.core.contracts.term import Term, TermDraft
from crascad.core.errors import TermNotFoundError, TermValidationError
from crascad.core.repository import TermRepository
from crascad.core.store.backends import FileStore, MemoryStore
from crascad.core.store.persistence import TermPersistence

TODAY = "2025-06-15"


class CountingStore(MemoryStore):
    """Memory store that counts writes."""

    def __init__(self) -> None:
        super().__init__()
        self.writes = 0

    def set(self, key: str, value: str) -> None:
        self.writes += 1
        super().set(key, value)


class FailingWriteStore(MemoryStore):
    def set(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")


def _repo(store: MemoryStore | None = None, terms: list[Term] | None = None) -> TermRepository:
    persistence = TermPersistence(store if store is not None else MemoryStore())
    return TermRepository(persistence, terms, today=lambda: TODAY)


def _draft(term: str = "Test", **overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "term": term,
        "reading": "てすと",
        "english": "Test",
        "meaning": "X",
        "categories": [Category.GENERAL],
    }
    data.update(overrides)
    return data


def test_create_on_empty_collection_assigns_id_1() -> None:
    repo = _repo()
    term = repo.create(_draft(), "alice")

    assert term.id == 1
    assert term.history == ()
    assert term.created_by == "alice"
    assert term.created_at == TODAY
    assert repo.get_all() == (term,)


def test_create_uses_max_plus_one_and_never_reuses_ids() -> None:
    repo = _repo()
    first = repo.create(_draft("a"), "alice")
    second = repo.create(_draft("b"), "alice")
    third = repo.create(_draft("c"), "alice")

    repo.delete(second.id)
    assert repo.create(_draft("d"), "alice").id == 4

    repo.delete(third.id)
    repo.delete(4)
    # max remaining is 1, so the next id is 2 even though 2 was used before
    assert repo.create(_draft("e"), "alice").id == first.id + 1


def test_create_ignores_caller_supplied_id() -> None:
    repo = _repo()
    repo.create(_draft("a"), "alice")
    created = repo.create(_draft("b", id=99), "alice")
    assert created.id == 2


def test_create_inserts_most_recent_first() -> None:
    repo = _repo()
    a = repo.create(_draft("a"), "alice")
    b = repo.create(TermDraft.model_validate(_draft("b")), "alice")
    assert [t.id for t in repo.get_all()] == [b.id, a.id]


@pytest.mark.parametrize(
    ("overrides", "operator"),
    [
        ({"term": ""}, "alice"),
        ({"meaning": "  "}, "alice"),
        ({"categories": []}, "alice"),
        ({}, ""),
        ({}, "   "),
    ],
)
def test_invalid_create_is_rejected_without_write(overrides: dict[str, Any], operator: str) -> None:
    store = CountingStore()
    repo = _repo(store)

    with pytest.raises(TermValidationError):
        repo.create(_draft(**overrides), operator)

    assert len(repo) == 0
    assert repo.revision == 0
    assert store.writes == 0


def test_update_preserves_creation_stamp_and_appends_history() -> None:
    repo = _repo()
    created = repo.create(_draft(), "alice")

    forged = created.model_copy(
        update={"meaning": "Y", "created_by": "mallory", "created_at": "1999-01-01", "history": ()}
    )
    updated = repo.update(forged, "bob")

    assert updated.meaning == "Y"
    assert updated.created_by == "alice"
    assert updated.created_at == TODAY
    assert [(r.edited_by, r.edited_at) for r in updated.history] == [("bob", TODAY)]
    assert repo.get(created.id) == updated


def test_each_update_appends_exactly_one_record() -> None:
    repo = _repo()
    term = repo.create(_draft(), "alice")
    for n, user in enumerate(["bob", "carol", "dave"], start=1):
        term = repo.update(term, user)
        assert len(term.history) == n
    assert [r.edited_by for r in term.history] == ["bob", "carol", "dave"]


def test_update_keeps_position_in_collection() -> None:
    repo = _repo()
    a = repo.create(_draft("a"), "alice")
    repo.create(_draft("b"), "alice")
    repo.update(a.model_copy(update={"english": "Changed"}), "bob")
    assert [t.term for t in repo.get_all()] == ["b", "a"]


def test_update_unknown_id_raises_not_found() -> None:
    store = CountingStore()
    repo = _repo(store)
    repo.create(_draft(), "alice")
    ghost = repo.get_all()[0].model_copy(update={"id": 42})

    with pytest.raises(TermNotFoundError):
        repo.update(ghost, "bob")
    assert store.writes == 1


def test_update_to_empty_categories_rejected_and_state_unchanged() -> None:
    repo = _repo()
    created = repo.create(_draft(categories=[Category.RESIN_MOLD]), "alice")
    emptied = created.model_copy(update={"categories": ()})

    with pytest.raises(TermValidationError):
        repo.update(emptied, "bob")

    stored = repo.get(created.id)
    assert stored is not None
    assert stored.categories == (Category.RESIN_MOLD,)
    assert stored.history == ()


def test_toggle_then_update_cannot_empty_categories() -> None:
    repo = _repo()
    created = repo.create(_draft(categories=[Category.OTHER]), "alice")
    cats = toggle_category(created.categories, Category.OTHER)
    updated = repo.update(created.model_copy(update={"categories": cats}), "bob")
    assert updated.categories == (Category.OTHER,)


def test_update_requires_operator() -> None:
    repo = _repo()
    created = repo.create(_draft(), "alice")
    with pytest.raises(TermValidationError):
        repo.update(created, "")


def test_edit_applies_partial_changes() -> None:
    repo = _repo()
    created = repo.create(_draft(), "alice")
    updated = repo.edit(created.id, {"imageUrl": "https://example.com/a.png"}, "bob")
    assert updated.image_url == "https://example.com/a.png"
    assert updated.term == "Test"
    assert len(updated.history) == 1


@pytest.mark.parametrize("field", ["id", "createdBy", "created_at", "history"])
def test_edit_rejects_repository_owned_fields(field: str) -> None:
    store = CountingStore()
    repo = _repo(store)
    created = repo.create(_draft(), "alice")

    with pytest.raises(TermValidationError):
        repo.edit(created.id, {field: 5}, "bob")

    assert repo.get(created.id) == created
    assert store.writes == 1


def test_edit_unknown_id_raises_not_found() -> None:
    with pytest.raises(TermNotFoundError):
        _repo().edit(7, {"meaning": "Y"}, "bob")


def test_delete_is_idempotent_and_saves() -> None:
    store = CountingStore()
    repo = _repo(store)
    term = repo.create(_draft(), "alice")

    repo.delete(term.id)
    repo.delete(term.id)

    assert len(repo) == 0
    assert store.writes == 3


def test_every_mutation_writes_post_mutation_state() -> None:
    store = CountingStore()
    repo = _repo(store)
    persistence = TermPersistence(store)

    term = repo.create(_draft(), "alice")
    assert persistence.load() == list(repo.get_all())
    repo.update(term.model_copy(update={"meaning": "Z"}), "bob")
    assert persistence.load() == list(repo.get_all())
    assert store.writes == 2
    assert repo.revision == 2


def test_write_failure_keeps_memory_state_and_records_warning() -> None:
    repo = _repo(FailingWriteStore())
    term = repo.create(_draft(), "alice")

    assert repo.get(term.id) == term
    assert repo.last_write_error is not None
    assert "quota exceeded" in repo.last_write_error.message


def test_open_loads_seed_when_store_empty() -> None:
    repo = TermRepository.open(TermPersistence(MemoryStore()), today=lambda: TODAY)
    assert len(repo) > 0
    created = repo.create(_draft(), "alice")
    assert created.id == max(t.id for t in repo.get_all() if t.id != created.id) + 1


def test_ids_stay_unique_under_random_operations() -> None:
    """For any sequence of create/update/delete, ids remain unique."""
    rng = random.Random(20240601)
    repo = _repo()
    for step in range(200):
        ids = [t.id for t in repo.get_all()]
        action = rng.choice(["create", "create", "update", "delete"])
        if action == "create" or not ids:
            repo.create(_draft(f"t{step}"), "alice")
        elif action == "update":
            target = repo.get(rng.choice(ids))
            assert target is not None
            repo.update(target.model_copy(update={"meaning": f"m{step}"}), "bob")
        else:
            repo.delete(rng.choice(ids))
        all_ids = [t.id for t in repo.get_all()]
        assert len(all_ids) == len(set(all_ids))


def test_unencodable_text_is_a_write_warning_and_keeps_file(tmp_path: Path) -> None:
    """A term the file store cannot encode stays in memory; the stored file survives."""
    store = FileStore(tmp_path)
    repo = TermRepository.open(TermPersistence(store), today=lambda: TODAY)
    repo.create(_draft("ok"), "alice")
    before = store.path_for("crascad_terms").read_bytes()

    created = repo.create(_draft("a\udcff"), "bob")

    assert repo.get(created.id) == created
    assert repo.last_write_error is not None
    assert store.path_for("crascad_terms").read_bytes() == before
    assert len(TermPersistence(FileStore(tmp_path)).load()) == len(repo) - 1

"""
Glossary session: the facade a presentation layer talks to.

A session owns one :class:`TermRepository`, the current query inputs
(category filter, search text) and a :class:`SelectionCoordinator`. After
every call that can change the visible list it recomputes the view and
reconciles the selection, so callers only ever read consistent snapshots:

- ``filtered``       : terms passing the current filter, in stored order.
- ``active``         : the selected term, or None.
- ``total_count``    : number of stored terms, regardless of filters.
- ``category_counts``: terms per category over the whole collection.
- ``write_warning``  : the last persistence write failure, if any.

There is no ambient state: build a session explicitly (``GlossarySession.open``)
and pass it to whatever needs it.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from crascad.core.contracts.category import Category
from crascad.core.contracts.term import Term, TermDraft, current_date
from crascad.core.errors import PersistenceWriteError, TermNotVisibleError
from crascad.core.query import ALL, CategoryFilter, count_by_category, filter_terms
from crascad.core.repository import TermRepository
from crascad.core.selection import SelectionCoordinator
from crascad.core.settings import load_settings
from crascad.core.store.backends import FileStore, KeyValueStore
from crascad.core.store.persistence import TermPersistence


class GlossarySession:
    """Repository + query state + selection, kept mutually consistent."""

    def __init__(self, repository: TermRepository) -> None:
        self.repository = repository
        self._category_filter: CategoryFilter = ALL
        self._search_text: str = ""
        self._selection = SelectionCoordinator()
        self._filtered: tuple[Term, ...] = ()
        self._recompute()

    @classmethod
    def open(
        cls,
        store: KeyValueStore | None = None,
        *,
        data_dir: Path | None = None,
        key: str | None = None,
        today: Callable[[], str] = current_date,
    ) -> GlossarySession:
        """Load a session from ``store`` (default: a `FileStore` from settings)."""
        cfg = load_settings()
        backend = store if store is not None else FileStore(data_dir or cfg.data_dir)
        persistence = TermPersistence(backend, key=key or cfg.store_key)
        return cls(TermRepository.open(persistence, today=today))

    # ----------------------------- Derived view ------------------------------

    @property
    def filtered(self) -> tuple[Term, ...]:
        return self._filtered

    @property
    def active(self) -> Term | None:
        return self._selection.active

    @property
    def total_count(self) -> int:
        return len(self.repository)

    @property
    def category_filter(self) -> CategoryFilter:
        return self._category_filter

    @property
    def search_text(self) -> str:
        return self._search_text

    @property
    def category_counts(self) -> dict[Category, int]:
        return count_by_category(self.repository.get_all())

    @property
    def write_warning(self) -> PersistenceWriteError | None:
        return self.repository.last_write_error

    def get_all(self) -> tuple[Term, ...]:
        return self.repository.get_all()

    # ------------------------------- Queries ---------------------------------

    def set_category_filter(self, category: CategoryFilter) -> tuple[Term, ...]:
        self._category_filter = category
        return self._recompute()

    def set_search_text(self, text: str) -> tuple[Term, ...]:
        self._search_text = text
        return self._recompute()

    def select(self, term: Term) -> Term:
        """Make ``term`` the active one.

        Raises
        ------
        TermNotVisibleError
            If ``term`` is not in the current filtered list.
        """
        if not any(t.id == term.id for t in self._filtered):
            raise TermNotVisibleError(term.id)
        return self._selection.select(term)

    # ------------------------------ Mutations --------------------------------

    def create(self, draft: TermDraft | Mapping[str, Any], operator_name: str) -> Term:
        """Create a term and make it active when it is visible."""
        term = self.repository.create(draft, operator_name)
        self._selection.select(term)
        self._recompute()
        return term

    def update(self, term: Term, operator_name: str) -> Term:
        updated = self.repository.update(term, operator_name)
        self._recompute()
        return updated

    def edit(self, term_id: int, changes: Mapping[str, Any], operator_name: str) -> Term:
        updated = self.repository.edit(term_id, changes, operator_name)
        self._recompute()
        return updated

    def delete(self, term_id: int) -> None:
        self.repository.delete(term_id)
        self._selection.on_deleted(term_id)
        self._recompute()

    def _recompute(self) -> tuple[Term, ...]:
        self._filtered = filter_terms(
            self.repository.get_all(), self._category_filter, self._search_text
        )
        self._selection.reconcile(self._filtered)
        return self._filtered


__all__ = ["GlossarySession"]

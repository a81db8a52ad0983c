"""Keep a single active term consistent with the visible term list.

States
------
- ``NoSelection``: ``active is None``.
- ``Selected(term)``: ``active`` holds a term.

Transitions
-----------
- ``reconcile(filtered)`` after every recomputation of the visible list:
  keep the selection if its id is still visible, otherwise fall back to the
  first visible term, or to ``NoSelection`` when nothing is visible.
- ``select(term)``: explicit user choice, regardless of prior state.
- ``on_deleted(term_id)``: clear immediately if the active term was deleted;
  the next ``reconcile`` picks the replacement.
"""

from __future__ import annotations

from collections.abc import Sequence

from crascad.core.contracts.term import Term


class SelectionCoordinator:
    """State machine over one optional active term."""

    __slots__ = ("_active",)

    def __init__(self) -> None:
        self._active: Term | None = None

    @property
    def active(self) -> Term | None:
        return self._active

    @property
    def has_selection(self) -> bool:
        return self._active is not None

    def select(self, term: Term) -> Term:
        self._active = term
        return term

    def clear(self) -> None:
        self._active = None

    def on_deleted(self, term_id: int) -> None:
        if self._active is not None and self._active.id == term_id:
            self._active = None

    def reconcile(self, filtered: Sequence[Term]) -> Term | None:
        """Apply the visibility rule against a freshly computed list.

        A kept selection is refreshed to the instance in ``filtered`` so that
        edits to the active term are reflected.
        """
        if self._active is not None:
            for term in filtered:
                if term.id == self._active.id:
                    self._active = term
                    return term
        self._active = filtered[0] if filtered else None
        return self._active


__all__ = ["SelectionCoordinator"]

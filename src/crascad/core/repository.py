"""
In-memory term repository with id allocation and an append-only audit trail.

The repository owns the canonical collection for a session. It provides:

- ``create(draft, operator_name)``: validate, allocate ``max(id) + 1``, stamp
  the creator, insert as the most recent entry.
- ``update(term, operator_name)``: replace a stored term, keeping its
  creation stamp and appending one ``EditRecord``.
- ``edit(term_id, changes, operator_name)``: partial update through ``update``.
- ``delete(term_id)``: remove if present; unknown ids are a no-op.

Every mutation bumps ``revision`` and is followed by exactly one
``TermPersistence.save`` of the post-mutation collection. Rejected operations
raise before anything changes, so they neither bump the revision nor write.

A failed write does not roll back memory: the in-memory collection stays
authoritative for the session, the failure is logged as a warning and kept in
``last_write_error`` until the next successful write.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from crascad.core.contracts.term import (
    EDITABLE_FIELDS,
    EditRecord,
    Term,
    TermDraft,
    current_date,
    field_name,
    merge_changes,
    new_term,
)
from crascad.core.errors import PersistenceWriteError, TermNotFoundError, TermValidationError
from crascad.core.settings import get_logger
from crascad.core.store.persistence import TermPersistence

log = get_logger("crascad.repository")


def _rejection(exc: ValidationError) -> TermValidationError:
    """Convert the first pydantic error into a domain validation error."""
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or None
    return TermValidationError(f"{field}: {first['msg']}" if field else first["msg"], field)


def _require_operator(operator_name: str) -> str:
    if not operator_name or not operator_name.strip():
        raise TermValidationError("operator name is required", "operator_name")
    return operator_name


class TermRepository:
    """
    Authoritative, ordered collection of glossary terms.

    Attributes
    ----------
    _terms : list[Term]
        Stored terms, most recently created first.
    _rev : int
        Monotonically increasing revision counter (bumps on every mutation).
    last_write_error : PersistenceWriteError | None
        The failure of the most recent save, if it failed.
    """

    def __init__(
        self,
        persistence: TermPersistence,
        terms: list[Term] | None = None,
        *,
        today: Callable[[], str] = current_date,
    ) -> None:
        self._persistence = persistence
        self._terms: list[Term] = list(terms or [])
        self._today = today
        self._rev: int = 0
        self.last_write_error: PersistenceWriteError | None = None

    @classmethod
    def open(
        cls, persistence: TermPersistence, *, today: Callable[[], str] = current_date
    ) -> TermRepository:
        """Build a repository seeded from ``persistence.load()``."""
        return cls(persistence, persistence.load(), today=today)

    # ------------------------------- Reads ----------------------------------

    def get_all(self) -> tuple[Term, ...]:
        """Return a read-only snapshot of the collection in stored order."""
        return tuple(self._terms)

    def get(self, term_id: int) -> Term | None:
        """Return the term with ``term_id``, or None."""
        for term in self._terms:
            if term.id == term_id:
                return term
        return None

    @property
    def revision(self) -> int:
        return self._rev

    def __len__(self) -> int:
        return len(self._terms)

    def __iter__(self) -> Iterator[Term]:
        return iter(tuple(self._terms))

    # ----------------------------- Mutations --------------------------------

    def create(self, draft: TermDraft | Mapping[str, Any], operator_name: str) -> Term:
        """
        Validate ``draft`` and store it as a new term.

        Parameters
        ----------
        draft : TermDraft | Mapping[str, Any]
            Term content without an id. Mappings are validated into a draft;
            any ``id`` they carry is ignored.
        operator_name : str
            Free-text attribution recorded as ``created_by``.

        Raises
        ------
        TermValidationError
            On empty required text, an empty category set or a blank operator.
        """
        operator = _require_operator(operator_name)
        if not isinstance(draft, TermDraft):
            try:
                draft = TermDraft.model_validate(draft)
            except ValidationError as exc:
                raise _rejection(exc) from exc

        term = new_term(
            draft, term_id=self._next_id(), operator_name=operator, today=self._today()
        )
        self._terms.insert(0, term)
        log.info("Created term %d (%s) by %s.", term.id, term.term, operator)
        self._commit()
        return term

    def update(self, term: Term, operator_name: str) -> Term:
        """
        Replace the stored term sharing ``term.id`` and record the edit.

        All editable fields come from ``term``. ``created_by``/``created_at``
        and the prior ``history`` come from the stored record, whatever the
        caller supplies; one ``EditRecord`` is appended.

        Raises
        ------
        TermNotFoundError
            If no stored term has ``term.id``.
        TermValidationError
            If the merged term is invalid or the operator is blank.
        """
        operator = _require_operator(operator_name)
        index = self._index_of(term.id)
        existing = self._terms[index]

        record = EditRecord(edited_by=operator, edited_at=self._today())
        try:
            updated = Term.model_validate(
                {
                    **term.model_dump(include=set(EDITABLE_FIELDS)),
                    "id": existing.id,
                    "created_by": existing.created_by,
                    "created_at": existing.created_at,
                    "history": (*existing.history, record),
                }
            )
        except ValidationError as exc:
            raise _rejection(exc) from exc

        self._terms[index] = updated
        log.info("Updated term %d by %s (edit #%d).", updated.id, operator, len(updated.history))
        self._commit()
        return updated

    def edit(self, term_id: int, changes: Mapping[str, Any], operator_name: str) -> Term:
        """
        Apply a partial set of editable field ``changes`` to a stored term.

        Changing ``id`` or any repository-owned field is rejected outright
        rather than ignored.
        """
        _require_operator(operator_name)
        existing = self._terms[self._index_of(term_id)]

        editable = set(EDITABLE_FIELDS)
        for key in changes:
            name = field_name(key)
            if name not in editable:
                raise TermValidationError(f"field '{key}' cannot be edited", name)

        try:
            merged = merge_changes(existing, changes)
        except ValidationError as exc:
            raise _rejection(exc) from exc
        return self.update(merged, operator_name)

    def delete(self, term_id: int) -> None:
        """Remove the term with ``term_id``; absent ids are not an error."""
        before = len(self._terms)
        self._terms = [t for t in self._terms if t.id != term_id]
        if len(self._terms) < before:
            log.info("Deleted term %d.", term_id)
        self._commit()

    # ----------------------------- Internals --------------------------------

    def _next_id(self) -> int:
        """Return ``max(id) + 1``; deleted ids are never reused."""
        return max((t.id for t in self._terms), default=0) + 1

    def _index_of(self, term_id: int) -> int:
        for index, term in enumerate(self._terms):
            if term.id == term_id:
                return index
        raise TermNotFoundError(term_id)

    def _commit(self) -> None:
        self._rev += 1
        try:
            self._persistence.save(self._terms)
        except PersistenceWriteError as exc:
            log.warning("%s (in-memory state kept).", exc)
            self.last_write_error = exc
        else:
            self.last_write_error = None


__all__ = ["TermRepository"]

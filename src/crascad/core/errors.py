"""Exception types for the glossary core.

Callers can distinguish between:

    - rejected mutations (validation, unknown ids)
    - durable-store problems (unreadable content, failed writes)
    - failures of the AI explanation collaborator

None of these is fatal: repository operations that raise leave the
collection untouched, and persistence errors degrade to seed data or a
warning.

Typical usage:

    from crascad.core.errors import TermNotFoundError, TermValidationError

    try:
        session.update(term, operator_name="bob")
    except TermValidationError as e:
        console.print(f"Rejected: {e}")
"""

from __future__ import annotations


class GlossaryError(Exception):
    """Base class for all glossary errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class TermValidationError(GlossaryError):
    """Raised when a create/update carries empty required fields, an empty
    category set, a blank operator name or a change to a write-once field."""

    def __init__(self, reason: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(f"Invalid term: {reason}")


class TermNotFoundError(GlossaryError):
    """Raised when an update references an id that is not in the collection."""

    def __init__(self, term_id: int) -> None:
        self.term_id = term_id
        super().__init__(f"Term with id {term_id} does not exist.")


class PersistenceReadError(GlossaryError):
    """Raised when stored content cannot be decoded into a term collection."""

    def __init__(self, key: str, detail: str) -> None:
        self.key = key
        super().__init__(f"Could not read stored terms under '{key}': {detail}")


class PersistenceWriteError(GlossaryError):
    """Raised when the durable store rejects a write."""

    def __init__(self, key: str, detail: str) -> None:
        self.key = key
        super().__init__(f"Could not save terms under '{key}': {detail}")


class TermNotVisibleError(GlossaryError):
    """Raised when selecting a term that is not in the current result list."""

    def __init__(self, term_id: int) -> None:
        self.term_id = term_id
        super().__init__(f"Term {term_id} is not in the current result list.")


class ExplanationError(GlossaryError):
    """Raised (or returned as ``Err``) when the AI explanation call fails."""


__all__ = [
    "ExplanationError",
    "GlossaryError",
    "PersistenceReadError",
    "PersistenceWriteError",
    "TermNotFoundError",
    "TermNotVisibleError",
    "TermValidationError",
]

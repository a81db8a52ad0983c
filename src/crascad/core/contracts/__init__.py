"""Entity contracts shared by the repository, query engine and presentation."""

from __future__ import annotations

from .category import Category, is_valid_category_set, toggle_category
from .term import EditRecord, Term, TermDraft, current_date, new_term

__all__ = [
    "Category",
    "EditRecord",
    "Term",
    "TermDraft",
    "current_date",
    "is_valid_category_set",
    "new_term",
    "toggle_category",
]

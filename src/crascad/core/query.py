"""Derive the visible term list from a category filter and a search string.

``filter_terms`` is a pure function: same inputs, same output, no side
effects. It is cheap enough to recompute on every change, so no result is
cached between calls.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import Final, Literal

from crascad.core.contracts.category import Category
from crascad.core.contracts.term import Term

ALL: Final = "ALL"

CategoryFilter = Category | Literal["ALL"]


def matches_category(term: Term, category_filter: CategoryFilter) -> bool:
    """True if the filter is ``ALL`` or ``term`` carries the filtered tag."""
    return category_filter == ALL or category_filter in term.categories


def matches_search(term: Term, search_text: str) -> bool:
    """Case-insensitive substring match over the searchable text fields."""
    if not search_text:
        return True
    needle = search_text.lower()
    haystacks = (term.term, term.reading, term.english, term.meaning, term.alias)
    return any(h is not None and needle in h.lower() for h in haystacks)


def filter_terms(
    terms: Iterable[Term], category_filter: CategoryFilter = ALL, search_text: str = ""
) -> tuple[Term, ...]:
    """Return the terms passing both filters, in their original order."""
    return tuple(
        t for t in terms if matches_category(t, category_filter) and matches_search(t, search_text)
    )


def count_by_category(terms: Iterable[Term]) -> dict[Category, int]:
    """Return how many terms carry each category (zero counts included)."""
    counts: Counter[Category] = Counter(c for t in terms for c in t.categories)
    return {c: counts.get(c, 0) for c in Category}


def parse_category_filter(value: str) -> CategoryFilter:
    """Resolve ``ALL``, a member name (``RESIN_MOLD``) or a stored value."""
    if value.upper() == ALL:
        return ALL
    try:
        return Category[value.upper()]
    except KeyError:
        return Category(value)


__all__ = [
    "ALL",
    "CategoryFilter",
    "count_by_category",
    "filter_terms",
    "matches_category",
    "matches_search",
    "parse_category_filter",
]

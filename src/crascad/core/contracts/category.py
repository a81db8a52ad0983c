"""Category: the closed set of topical tags a glossary term can carry."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum


class Category(str, Enum):
    """Seven fixed domain tags.

    Values are the labels stored in persisted data; display strings for other
    languages belong to the presentation layer.
    """

    GENERAL = "一般"
    ALJ_SPECIALIZED = "ALJ専門"
    TOYOTA_TERMS = "トヨタ用語"
    OTHER = "その他"
    RESIN_MOLDING = "樹脂成型"
    RESIN_MOLD = "樹脂金型"
    DESIGN_SPECIALIZED = "設計専門"


def is_valid_category_set(categories: Iterable[Category]) -> bool:
    """Return True if ``categories`` holds at least one tag."""
    return bool(tuple(categories))


def toggle_category(
    categories: tuple[Category, ...], category: Category
) -> tuple[Category, ...]:
    """Add ``category`` if missing, remove it if present.

    Removing the last remaining tag would leave the set empty, so that case
    returns ``categories`` unchanged.
    """
    if category not in categories:
        return (*categories, category)
    if len(categories) == 1:
        return categories
    return tuple(c for c in categories if c is not category)


__all__ = ["Category", "is_valid_category_set", "toggle_category"]

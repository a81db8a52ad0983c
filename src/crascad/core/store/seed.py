"""Built-in seed dataset.

Used when the durable store has no record yet, or when the stored record
cannot be decoded. Kept as raw payloads (the persisted camelCase shape) so
the seed goes through the same validation path as stored data.
"""

from __future__ import annotations

from typing import Any

from crascad.core.contracts.term import Term

_SEED_AUTHOR = "system"
_SEED_DATE = "2024-01-01"

SEED_PAYLOAD: list[dict[str, Any]] = [
    {
        "id": 1,
        "term": "改善",
        "reading": "かいぜん",
        "english": "Kaizen (continuous improvement)",
        "meaning": "Small, ongoing improvements to work methods made by the people doing the work.",
        "categories": ["一般", "トヨタ用語"],
    },
    {
        "id": 2,
        "term": "自働化",
        "reading": "じどうか",
        "alias": "ニンベンのついた自動化",
        "english": "Jidoka (automation with a human touch)",
        "meaning": "Machines and operators stop the line as soon as an abnormality occurs.",
        "categories": ["トヨタ用語"],
    },
    {
        "id": 3,
        "term": "段取り替え",
        "reading": "だんどりがえ",
        "alias": "段替え",
        "english": "Changeover",
        "meaning": "Switching a machine or line from one product to the next.",
        "categories": ["トヨタ用語", "その他"],
    },
    {
        "id": 4,
        "term": "射出成形",
        "reading": "しゃしゅつせいけい",
        "english": "Injection molding",
        "meaning": "Forming parts by injecting molten resin into a closed mold under pressure.",
        "categories": ["樹脂成型"],
    },
    {
        "id": 5,
        "term": "ヒケ",
        "reading": "ひけ",
        "alias": "シンクマーク",
        "english": "Sink mark",
        "meaning": "A surface depression caused by local shrinkage in thick resin sections.",
        "categories": ["樹脂成型"],
    },
    {
        "id": 6,
        "term": "ゲート",
        "reading": "げーと",
        "english": "Gate",
        "meaning": "The opening through which molten resin enters the mold cavity.",
        "categories": ["樹脂金型", "樹脂成型"],
    },
    {
        "id": 7,
        "term": "抜き勾配",
        "reading": "ぬきこうばい",
        "english": "Draft angle",
        "meaning": "Taper on mold walls that lets the part release from the cavity.",
        "categories": ["樹脂金型"],
    },
    {
        "id": 8,
        "term": "公差",
        "reading": "こうさ",
        "english": "Tolerance",
        "meaning": "The permitted range of variation of a dimension on a drawing.",
        "categories": ["設計専門"],
    },
    {
        "id": 9,
        "term": "号口",
        "reading": "ごうぐち",
        "english": "Mass production",
        "meaning": "The stage after launch where the part is built on the regular production line.",
        "categories": ["ALJ専門", "一般"],
    },
]


def seed_terms() -> list[Term]:
    """Return a fresh list of validated seed terms."""
    return [
        Term.model_validate({**raw, "createdBy": _SEED_AUTHOR, "createdAt": _SEED_DATE})
        for raw in SEED_PAYLOAD
    ]


__all__ = ["SEED_PAYLOAD", "seed_terms"]

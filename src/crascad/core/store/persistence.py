"""Load/save the full term collection to a key-value store.

Format
------
A single record under a fixed key (default ``"crascad_terms"``) whose value
is a JSON array of term objects in their camelCase payload shape. There is no
version field.

Load policy
-----------
The stored array is validated as a whole. If any record fails validation
(missing required text, empty categories, bad date stamp) or two records share
an id, the entire load falls back to the seed dataset. Partially trusting a
corrupted collection would let later id allocation collide with dropped
records, so individual records are never salvaged.

``load()`` never raises. ``save()`` raises :class:`PersistenceWriteError`; the
repository turns that into a warning.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence

from pydantic import TypeAdapter, ValidationError

from crascad.core.contracts.term import Term
from crascad.core.errors import PersistenceReadError, PersistenceWriteError
from crascad.core.settings import DEFAULT_STORE_KEY, get_logger

from .backends import KeyValueStore
from .seed import seed_terms

log = get_logger("crascad.store")

_TERMS_ADAPTER: TypeAdapter[list[Term]] = TypeAdapter(list[Term])


def encode_terms(terms: Sequence[Term]) -> str:
    """Serialize ``terms`` to the stored JSON string."""
    return json.dumps([t.to_payload() for t in terms], ensure_ascii=False, indent=2)


def decode_terms(raw: str, *, key: str = DEFAULT_STORE_KEY) -> list[Term]:
    """Parse a stored JSON string back into terms.

    Raises
    ------
    PersistenceReadError
        If the content is not valid JSON, does not match the term schema, or
        contains duplicate ids.
    """
    try:
        terms = _TERMS_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise PersistenceReadError(key, f"{exc.error_count()} validation error(s)") from exc

    ids = [t.id for t in terms]
    if len(ids) != len(set(ids)):
        raise PersistenceReadError(key, "duplicate term ids")
    return terms


class TermPersistence:
    """Adapter between the repository and a durable key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = DEFAULT_STORE_KEY,
        seed: Callable[[], list[Term]] = seed_terms,
    ) -> None:
        self.store = store
        self.key = key
        self._seed = seed

    def load(self) -> list[Term]:
        """Return the stored collection, or the seed dataset if absent/corrupt."""
        try:
            raw = self.store.get(self.key)
        except (OSError, UnicodeDecodeError) as exc:
            log.error("%s; falling back to seed dataset.", PersistenceReadError(self.key, str(exc)))
            return self._seed()

        if raw is None:
            log.info("No stored terms under '%s'; using seed dataset.", self.key)
            return self._seed()

        try:
            terms = decode_terms(raw, key=self.key)
        except PersistenceReadError as exc:
            log.error("%s; falling back to seed dataset.", exc)
            return self._seed()

        log.debug("Loaded %d terms from '%s'.", len(terms), self.key)
        return terms

    def save(self, terms: Sequence[Term]) -> None:
        """Overwrite the stored record with the full ``terms`` collection."""
        payload = encode_terms(terms)
        try:
            self.store.set(self.key, payload)
        except (OSError, ValueError) as exc:
            # ValueError covers UnicodeEncodeError from unencodable text.
            raise PersistenceWriteError(self.key, str(exc)) from exc


__all__ = ["TermPersistence", "decode_terms", "encode_terms"]

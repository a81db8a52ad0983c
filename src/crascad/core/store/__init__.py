from __future__ import annotations

from .backends import FileStore, KeyValueStore, MemoryStore
from .persistence import TermPersistence, decode_terms, encode_terms
from .seed import SEED_PAYLOAD, seed_terms

__all__ = [
    "FileStore",
    "KeyValueStore",
    "MemoryStore",
    "SEED_PAYLOAD",
    "TermPersistence",
    "decode_terms",
    "encode_terms",
    "seed_terms",
]

"""Collaborator agents that read glossary data but never mutate it."""

from __future__ import annotations

__all__ = ["__doc__"]

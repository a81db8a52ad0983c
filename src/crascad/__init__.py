"""Crascad: a trilingual glossary manager for manufacturing vocabulary.

The package is split into:

- ``crascad.core``    : entity model, repository, query engine, selection, session.
- ``crascad.llm``     : a small multi-provider LLM client.
- ``crascad.agents``  : the AI explanation collaborator.
- ``crascad.cli``     : the terminal presentation layer.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.1.0"

"""Core package initializer for Crascad.

Downstream code imports from the submodules directly, e.g.:
    from crascad.core.session import GlossarySession
    from crascad.core.settings import settings, get_logger
"""

from __future__ import annotations

__all__ = ["__doc__"]

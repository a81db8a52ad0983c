# -----------------------------------------------------------------------------
# A tiny, in-process model registry used by the LLM client.
#
# The registry gives us a single place to:
#   - declare human-friendly aliases ("explainer", "fast", ...)
#   - pin them to concrete provider model IDs
#   - keep default sampling parameters (temperature, max_tokens, thinking budget)
#   - attach provider-specific base URLs
#
# Pure Python and side-effect free, so it can be imported from the CLI, the
# explainer agent or tests.
# -----------------------------------------------------------------------------
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
OPENAI_BASE_URL = "https://api.openai.com/v1"


@dataclass(frozen=True, slots=True)
class ModelConfig:
    """Configuration for a single LLM model.

    Parameters
    ----------
    name:
        Provider-specific model identifier, e.g. ``"gemini-3-flash-preview"``.
    provider:
        Logical provider name driving authentication and endpoint selection:
        ``"google"`` (Gemini ``generateContent``) or an OpenAI-compatible
        provider (``"openai"``, ``"deepseek"``).
    base_url:
        Default API base URL; overridable per provider through env vars.
    max_tokens:
        Default cap on generated tokens.
    temperature:
        Default sampling temperature.
    thinking_budget:
        Optional reasoning-token budget (Gemini ``thinkingConfig``). ``None``
        leaves the provider default in place.
    """

    name: str
    provider: str = "openai"
    base_url: str = OPENAI_BASE_URL
    max_tokens: int = 2048
    temperature: float = 0.5
    thinking_budget: int | None = None


MODEL_REGISTRY: dict[str, ModelConfig] = {
    # Term explanations: technical breakdown + usage examples in Markdown.
    # A small thinking budget buys better reasoning without long latency.
    "explainer": ModelConfig(
        name="gemini-3-flash-preview",
        provider="google",
        base_url=GEMINI_BASE_URL,
        max_tokens=4096,
        temperature=0.4,
        thinking_budget=1024,
    ),
    # Cheap, low-latency Gemini profile.
    "fast": ModelConfig(
        name="gemini-2.0-flash",
        provider="google",
        base_url=GEMINI_BASE_URL,
        max_tokens=2048,
        temperature=0.4,
    ),
    # OpenAI fallback for environments without a Google key.
    "openai": ModelConfig(
        name="gpt-4o-mini",
        provider="openai",
        base_url=OPENAI_BASE_URL,
        max_tokens=2048,
        temperature=0.4,
    ),
}

#: Default logical alias used when callers do not explicitly choose a model.
DEFAULT_ALIAS: str = "explainer"


def get_model(alias_or_name: str) -> ModelConfig:
    """Return a :class:`ModelConfig` for the given alias or model name.

    Known aliases resolve through :data:`MODEL_REGISTRY`. Anything else is
    treated as a concrete model ID: names starting with ``"gemini"`` go to
    Google, everything else to an OpenAI-compatible endpoint.
    """
    if alias_or_name in MODEL_REGISTRY:
        return MODEL_REGISTRY[alias_or_name]
    if alias_or_name.startswith("gemini"):
        return ModelConfig(name=alias_or_name, provider="google", base_url=GEMINI_BASE_URL)
    return ModelConfig(name=alias_or_name)


def all_models() -> Mapping[str, ModelConfig]:
    """Return a shallow copy of the registry (for diagnostics and tests)."""
    return dict(MODEL_REGISTRY)


__all__ = ["ModelConfig", "MODEL_REGISTRY", "DEFAULT_ALIAS", "get_model", "all_models"]

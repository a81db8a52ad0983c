# -----------------------------------------------------------------------------
# A small, synchronous LLM client used by the term explainer. It:
#   - reads provider API keys / base URLs from environment variables
#   - resolves logical aliases ("explainer") through the model registry
#   - exposes a single `generate()` method that returns a text completion
#
# HTTP goes through the standard library (`urllib.request`). Unit tests
# monkeypatch `LLMClient._post` so no real network call is made.
#
# Provider support
# ----------------
# 1. Google Gemini "generateContent" (provider="google"), the default for
#    term explanations: POST /models/{model}:generateContent
# 2. OpenAI-compatible Chat Completions (provider="openai" / "deepseek"):
#    POST /chat/completions
# -----------------------------------------------------------------------------
from __future__ import annotations

import json
import os
import urllib.error
import urllib.request
from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass
from typing import Any

from .models import DEFAULT_ALIAS, GEMINI_BASE_URL, OPENAI_BASE_URL, ModelConfig, get_model

_API_KEY_ENV: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
}
_BASE_URL_ENV: dict[str, str] = {
    "openai": "OPENAI_BASE_URL",
    "deepseek": "DEEPSEEK_BASE_URL",
}


@dataclass(slots=True)
class LLMClient:
    """Multi-provider LLM client with a simple `generate()` API.

    Parameters
    ----------
    google_api_key:
        Key for Gemini models; :meth:`from_env` reads ``GOOGLE_API_KEY``
        (falling back to ``API_KEY``).
    openai_api_key:
        Key for OpenAI models; read from ``OPENAI_API_KEY``.
    default_model_alias:
        Registry alias used when :meth:`generate` is called without ``model``.
    timeout_seconds:
        Network timeout for each HTTP request.
    """

    google_api_key: str = ""
    openai_api_key: str = ""
    default_model_alias: str = DEFAULT_ALIAS
    timeout_seconds: float = 60.0

    @classmethod
    def from_env(cls, default_model_alias: str = DEFAULT_ALIAS) -> LLMClient:
        """Construct a client from ``GOOGLE_API_KEY`` / ``OPENAI_API_KEY``."""
        return cls(
            google_api_key=os.getenv("GOOGLE_API_KEY") or os.getenv("API_KEY", ""),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            default_model_alias=default_model_alias,
        )

    def generate(
        self,
        messages: Sequence[Mapping[str, str]],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate a single text completion from chat-style ``messages``.

        Raises
        ------
        RuntimeError
            If a required API key is missing, the HTTP request fails, or the
            response cannot be turned into text.
        """
        config = get_model(model or self.default_model_alias)
        effective_temperature = float(
            temperature if temperature is not None else config.temperature
        )
        effective_max_tokens = int(max_tokens if max_tokens is not None else config.max_tokens)

        if config.provider.lower().strip() == "google":
            response = self._generate_gemini(
                config=config,
                messages=messages,
                temperature=effective_temperature,
                max_tokens=effective_max_tokens,
            )
            return self._extract_content_gemini(response)

        response = self._generate_openai_compatible(
            config=config,
            messages=messages,
            temperature=effective_temperature,
            max_tokens=effective_max_tokens,
        )
        return self._extract_content_openai(response)

    # --------------------------------------------------------------------- #
    # Provider-specific helpers
    # --------------------------------------------------------------------- #
    def _generate_gemini(
        self,
        *,
        config: ModelConfig,
        messages: Sequence[Mapping[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> dict[str, Any]:
        """Call Gemini ``generateContent``.

        A ``system`` message becomes ``systemInstruction``; the remaining
        messages map to ``contents`` (``assistant`` is renamed ``model``).
        """
        api_key = os.getenv("GOOGLE_API_KEY") or self.google_api_key
        if not api_key:
            raise RuntimeError("API Key not found: set GOOGLE_API_KEY to call Gemini models.")

        base_url = os.getenv("GOOGLE_API_BASE_URL") or config.base_url or GEMINI_BASE_URL
        url = f"{base_url.rstrip('/')}/models/{config.name}:generateContent"

        system_parts = [{"text": m["content"]} for m in messages if m["role"] == "system"]
        contents = [
            {
                "role": "model" if m["role"] == "assistant" else "user",
                "parts": [{"text": m["content"]}],
            }
            for m in messages
            if m["role"] != "system"
        ]

        generation_config: MutableMapping[str, Any] = {
            "temperature": temperature,
            "maxOutputTokens": max_tokens,
        }
        if config.thinking_budget is not None:
            generation_config["thinkingConfig"] = {"thinkingBudget": config.thinking_budget}

        payload: MutableMapping[str, Any] = {
            "contents": contents,
            "generationConfig": generation_config,
        }
        if system_parts:
            payload["systemInstruction"] = {"parts": system_parts}

        headers = {"Content-Type": "application/json", "x-goog-api-key": api_key}
        return self._post(url=url, headers=headers, payload=payload)

    def _generate_openai_compatible(
        self,
        *,
        config: ModelConfig,
        messages: Sequence[Mapping[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> dict[str, Any]:
        """Call a ``/chat/completions`` endpoint in the OpenAI format."""
        provider = config.provider.lower().strip()
        api_key_env = _API_KEY_ENV.get(provider, "OPENAI_API_KEY")

        api_key = os.getenv(api_key_env, "")
        if not api_key and provider == "openai":
            api_key = self.openai_api_key
        if not api_key:
            raise RuntimeError(
                f"Missing API key for provider '{provider}'. "
                f"Expected environment variable '{api_key_env}' to be set."
            )

        base_url = (
            os.getenv(_BASE_URL_ENV.get(provider, "OPENAI_BASE_URL"))
            or config.base_url
            or OPENAI_BASE_URL
        )
        url = base_url.rstrip("/") + "/chat/completions"

        payload: MutableMapping[str, Any] = {
            "model": config.name,
            "messages": [{"role": m["role"], "content": m["content"]} for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        headers = {"Content-Type": "application/json", "Authorization": f"Bearer {api_key}"}
        return self._post(url=url, headers=headers, payload=payload)

    # --------------------------------------------------------------------- #
    # Internal helpers (test seams)
    # --------------------------------------------------------------------- #
    def _post(
        self,
        *,
        url: str,
        headers: Mapping[str, str],
        payload: Mapping[str, Any],
    ) -> dict[str, Any]:
        """POST ``payload`` as JSON and decode the JSON response.

        This is the seam tests patch to avoid network I/O.
        """
        body = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(url=url, data=body, headers=dict(headers), method="POST")

        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore")
            raise RuntimeError(f"LLM HTTP error {exc.code}: {exc.reason}; body={detail!r}") from exc
        except urllib.error.URLError as exc:
            raise RuntimeError(f"LLM network error: {exc}") from exc
        except OSError as exc:
            # Read timeouts surface as a bare TimeoutError from resp.read().
            raise RuntimeError(f"LLM network error: {exc!r}") from exc

        try:
            decoded = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise RuntimeError("Failed to decode LLM response as JSON") from exc
        if not isinstance(decoded, dict):
            raise RuntimeError("LLM response is not a JSON object.")
        return decoded

    # --------------------------------------------------------------------- #
    # Response extraction helpers
    # --------------------------------------------------------------------- #
    @staticmethod
    def _extract_content_openai(response: Mapping[str, Any]) -> str:
        """Extract ``choices[0].message.content``; may be empty."""
        choices = response.get("choices")
        if not isinstance(choices, list) or not choices:
            raise RuntimeError("LLM response has no choices; cannot extract content.")

        if not isinstance(choices[0], Mapping):
            raise RuntimeError("LLM response choice[0] is not an object.")
        message = choices[0].get("message")
        if not isinstance(message, Mapping):
            raise RuntimeError("LLM response choice[0].message is missing or invalid.")

        content = message.get("content")
        return content if isinstance(content, str) else ""

    @staticmethod
    def _extract_content_gemini(response: Mapping[str, Any]) -> str:
        """Concatenate the text parts of ``candidates[0].content.parts``.

        Parts flagged ``"thought": true`` carry reasoning traces, not answer
        text, and are skipped. A candidate without text parts yields ``""``.
        """
        candidates = response.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            raise RuntimeError("Gemini response has no candidates; cannot extract content.")

        if not isinstance(candidates[0], Mapping):
            raise RuntimeError("Gemini response candidate[0] is not an object.")
        content = candidates[0].get("content")
        if not isinstance(content, Mapping):
            return ""

        parts = content.get("parts")
        if not isinstance(parts, list):
            return ""

        return "".join(
            part["text"]
            for part in parts
            if isinstance(part, Mapping)
            and isinstance(part.get("text"), str)
            and not part.get("thought")
        )


__all__ = ["LLMClient"]

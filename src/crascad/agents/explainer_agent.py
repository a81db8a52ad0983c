"""
Explainer agent: AI commentary for a single glossary term.

Responsibilities
----------------
- Build an engineer-interpreter prompt from a read-only `Term` (term, reading,
  English, categories, current meaning).
- Call the LLM client (model alias: "explainer") and return the free text as
  is, wrapped in a `Result`. The text is Markdown meant for display; it is
  never parsed or stored on the term.
- Turn every client failure (missing key, HTTP, quota, malformed response)
  into an `Err(ExplanationError)`. Nothing here touches the repository.

`ExplanationPanel` runs the call as a cancellable asyncio task. Opening a new
request or closing the panel cancels the pending one, and a result arriving
for a request that is no longer current is discarded.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from crascad.core.contracts.category import Category
from crascad.core.contracts.term import Term
from crascad.core.errors import ExplanationError
from crascad.core.result import Result, err, ok
from crascad.core.settings import get_logger
from crascad.llm.client import LLMClient

log = get_logger("crascad.explainer")

_EXPLAINER_MODEL_ALIAS = "explainer"
_EMPTY_EXPLANATION = "No explanation generated."
_FAILURE_MESSAGE = "Failed to generate explanation. Please check your API key."


def _get_llm_client() -> LLMClient:
    """Construct an LLM client configured for the explainer agent.

    Kept separate so tests can monkeypatch it with a fake client.
    """
    return LLMClient.from_env(default_model_alias=_EXPLAINER_MODEL_ALIAS)


def _build_messages(term: Term) -> list[dict[str, str]]:
    """Build chat messages asking for a technical breakdown of ``term``."""
    system_msg = {
        "role": "system",
        "content": (
            "You are an expert technical interpreter and engineer specializing in "
            "Japanese manufacturing (Toyota production system, resin molding, die design)."
        ),
    }

    categories = ", ".join(c.value for c in term.categories)
    lines = [
        "Please provide a detailed explanation for the following technical term:",
        "",
        f"Term (Japanese): {term.term}",
        f"Reading: {term.reading}",
    ]
    if term.alias:
        lines.append(f"Also known as: {term.alias}")
    lines += [
        f"English: {term.english}",
        f"Categories: {categories}",
        f"Current Basic Meaning: {term.meaning}",
        "",
        "Your explanation should include:",
        "1. A deeper technical breakdown of what it is.",
        "2. Example usage in a factory or design context.",
        "3. If applicable, related terms or antonyms.",
        "",
        "Format the output in clear Markdown using bullet points where necessary. "
        "Keep the tone professional and educational.",
    ]
    if Category.TOYOTA_TERMS in term.categories:
        lines.append("Emphasize the term's role in TPS (Toyota Production System).")

    return [system_msg, {"role": "user", "content": "\n".join(lines)}]


def explain_term(term: Term, client: LLMClient | None = None) -> Result[str, ExplanationError]:
    """Ask the explainer model about ``term``.

    Returns
    -------
    Result[str, ExplanationError]
        ``Ok(markdown)`` (a placeholder sentence if the model returned no
        text) or ``Err`` with a user-displayable message.
    """
    llm = client if client is not None else _get_llm_client()
    try:
        text = llm.generate(_build_messages(term), model=_EXPLAINER_MODEL_ALIAS)
    except (RuntimeError, OSError) as exc:
        log.error("Explanation for term %d failed: %s", term.id, exc)
        return err(ExplanationError(f"{_FAILURE_MESSAGE} ({exc})"))

    return ok(text.strip() or _EMPTY_EXPLANATION)


ExplanationStatus = Literal["loading", "ready", "error"]


@dataclass(frozen=True, slots=True)
class ExplanationView:
    """What the presentation layer shows for one explanation request."""

    term_id: int
    status: ExplanationStatus
    content: str = ""
    error: str | None = None


class ExplanationPanel:
    """Owns at most one in-flight explanation request.

    ``open`` must be called from a running event loop. The blocking LLM call
    runs in a worker thread via ``asyncio.to_thread``.
    """

    def __init__(
        self, explain: Callable[[Term], Result[str, ExplanationError]] = explain_term
    ) -> None:
        self._explain = explain
        self._task: asyncio.Task[ExplanationView] | None = None
        self.view: ExplanationView | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def open(self, term: Term) -> asyncio.Task[ExplanationView]:
        """Start explaining ``term``, cancelling any request still pending."""
        self.close()
        self.view = ExplanationView(term_id=term.id, status="loading")
        task = asyncio.create_task(self._run(term))
        self._task = task
        return task

    def close(self) -> None:
        """Drop the current request; its result, if it still arrives, is ignored."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self.view = None

    async def _run(self, term: Term) -> ExplanationView:
        result = await asyncio.to_thread(self._explain, term)
        if result.is_ok():
            view = ExplanationView(term_id=term.id, status="ready", content=result.unwrap())
        else:
            view = ExplanationView(
                term_id=term.id, status="error", error=result.unwrap_err().message
            )

        if asyncio.current_task() is self._task:
            self.view = view
        else:
            log.debug("Discarding late explanation for term %d.", term.id)
        return view


__all__ = ["ExplanationPanel", "ExplanationView", "explain_term"]

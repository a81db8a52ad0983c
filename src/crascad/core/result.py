"""Lightweight, typed Result container for explicit success/failure returns.

Motivation
----------
The AI explanation collaborator must never raise into the session that
requested it: network, auth and quota failures are expected outcomes that the
presentation layer renders inline. Returning a ``Result[T, E]`` keeps that
contract visible in the signature:

- ``Ok(value)`` / ``Err(error)`` variants,
- combinators: ``map``, ``map_err``,
- helpers: ``unwrap``, ``unwrap_err``, ``get_or``.

Example
-------
>>> from crascad.core.result import ok, err, Result
>>> def first_line(text: str) -> Result[str, str]:
...     return ok(text.splitlines()[0]) if text else err("empty explanation")
>>> first_line("Kaizen means...\\nmore").unwrap()
'Kaizen means...'
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, cast, overload

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


class Result(Generic[T, E]):
    """Sum type representing either success (`Ok[T]`) or failure (`Err[E]`)."""

    def is_ok(self) -> bool:
        """Return ``True`` if this is an :class:`Ok` value."""
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        """Return ``True`` if this is an :class:`Err` value."""
        return isinstance(self, Err)

    @overload
    def unwrap(self) -> T: ...
    @overload
    def unwrap(self, default: T) -> T: ...

    def unwrap(self, default: T | None = None) -> T:
        """Return the inner value if ``Ok``, else raise or return ``default``."""
        if isinstance(self, Ok):
            return cast(Ok[T, E], self).value
        if default is not None:
            return default
        raise RuntimeError(f"Attempted to unwrap Err: {self!r}")

    def unwrap_err(self) -> E:
        """Return the error value if ``Err``, else raise."""
        if isinstance(self, Err):
            return cast(Err[T, E], self).error
        raise RuntimeError(f"Attempted to unwrap_err on Ok: {self!r}")

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        """Apply ``fn`` to the success value; propagate error unchanged."""
        if isinstance(self, Ok):
            return Ok(fn(cast(Ok[T, E], self).value))
        return cast(Result[U, E], self)

    def map_err(self, fn: Callable[[E], F]) -> Result[T, F]:
        """Apply ``fn`` to the error value; propagate success unchanged."""
        if isinstance(self, Err):
            return Err(fn(cast(Err[T, E], self).error))
        return cast(Result[T, F], self)

    def get_or(self, default: T) -> T:
        """Return the success value or a default if ``Err``."""
        return self.unwrap(default)

    def __repr__(self) -> str:  # pragma: no cover - trivial representation
        if isinstance(self, Ok):
            return f"Ok({cast(Ok[T, E], self).value!r})"
        if isinstance(self, Err):
            return f"Err({cast(Err[T, E], self).error!r})"
        return "Result(?)"


@dataclass(frozen=True)
class Ok(Result[T, E]):
    """Successful result wrapping a value of type ``T``."""

    value: T


@dataclass(frozen=True)
class Err(Result[T, E]):
    """Failed result wrapping an error payload of type ``E``."""

    error: E


def ok(value: T) -> Result[T, E]:
    """Construct :class:`Ok` with better type inference at call sites."""
    return Ok(value)


def err(error: E) -> Result[T, E]:
    """Construct :class:`Err` with better type inference at call sites."""
    return Err(error)


__all__ = ["Err", "Ok", "Result", "err", "ok"]

"""Per-task logging fields backed by contextvars.

``session_state``, ``job_name`` and ``ticker`` are read by
StockPulseFormatter for every record, so a poll job or a wake callback only
has to set them once for all of its log lines to carry them.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar, Token

_session_state: ContextVar[str | None] = ContextVar("session_state", default=None)
_job_name: ContextVar[str | None] = ContextVar("job_name", default=None)
_ticker: ContextVar[str | None] = ContextVar("ticker", default=None)

_FIELDS: dict[str, ContextVar[str | None]] = {
    "session_state": _session_state,
    "job_name": _job_name,
    "ticker": _ticker,
}


def _field(name: str) -> ContextVar[str | None]:
    try:
        return _FIELDS[name]
    except KeyError:
        raise ValueError(f"Unknown context field: {name!r}") from None


def set_context(**fields: str | None) -> None:
    """Set logging fields for the current task; ``None`` leaves a field as it is."""
    for name, value in fields.items():
        if value is not None:
            _field(name).set(value)


def reset_context() -> None:
    for var in _FIELDS.values():
        var.set(None)


def get_session_state() -> str | None:
    return _session_state.get()


def get_job_name() -> str | None:
    return _job_name.get()


def get_ticker() -> str | None:
    return _ticker.get()


@asynccontextmanager
async def log_context(**fields: str | None) -> AsyncIterator[None]:
    """Scope logging fields to an ``async with`` block.

    Every name is checked before anything is set, and on exit each field
    goes back to the value it had on entry.
    """
    resolved = [(_field(name), value) for name, value in fields.items()]
    tokens: list[tuple[ContextVar[str | None], Token[str | None]]] = []
    for var, value in resolved:
        tokens.append((var, var.set(value)))
    try:
        yield
    finally:
        while tokens:
            var, token = tokens.pop()
            var.reset(token)

"""Dashboard notifications published by the update orchestrator."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from stockpulse.market.models import MarketSnapshot, SessionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarketStateChangedEvent:
    """The session state differs from the last observed one."""

    previous: SessionState | None
    snapshot: MarketSnapshot


@dataclass(frozen=True)
class QuotesUpdatedEvent:
    """Fresh quotes arrived from the price source."""

    quotes: dict[str, Any]
    fetched_at: datetime


@dataclass(frozen=True)
class NewsUpdatedEvent:
    """Fresh news items arrived from the news source."""

    fetched_at: datetime
    items: list[Any] = field(default_factory=list)


# Plain function or coroutine function taking the event
Listener = Callable[[Any], object]


class EventBus:
    """Delivers events to listeners registered for the event's exact type.

    Listeners run one after another in registration order on the caller's
    task. A listener that raises is logged and skipped; the rest still see
    the event.
    """

    def __init__(self) -> None:
        self._listeners: dict[type, list[Listener]] = {}

    def subscribe(self, event_type: type, listener: Listener) -> Callable[[], None]:
        """Register *listener* for *event_type* and return a function that removes it."""
        self._listeners.setdefault(event_type, []).append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(event_type, listener)

        return unsubscribe

    def unsubscribe(self, event_type: type, listener: Listener) -> None:
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    async def emit(self, event: object) -> int:
        """Deliver *event* and return how many listeners handled it without error."""
        delivered = 0
        for listener in tuple(self._listeners.get(type(event), ())):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    "Listener %s failed on %s",
                    getattr(listener, "__qualname__", repr(listener)),
                    type(event).__name__,
                )
                continue
            delivered += 1
        return delivered

    def listener_count(self, event_type: type) -> int:
        return len(self._listeners.get(event_type, ()))

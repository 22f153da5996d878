"""In-process notification channel for rate model and controller events."""

from __future__ import annotations

import logging
from dataclasses import astuple, dataclass
from typing import Any, Callable, Iterator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewInterestParams:
    """Emitted when a kinked curve is configured or updated."""

    base_rate_per_period: int
    multiplier_per_period: int
    jump_multiplier_per_period: int
    kink: int


@dataclass(frozen=True)
class NewFlatInterestParams:
    """Emitted when a flat curve is constructed."""

    base_rate_per_period: int
    multiplier_per_period: int


def as_tuple(event: Any) -> tuple:
    """Event fields in declaration order, for positional consumers."""
    return astuple(event)


class EventLog:
    """Ordered record of emitted events with optional subscribers."""

    def __init__(self) -> None:
        self._events: list[Any] = []
        self._subscribers: list[Callable[[Any], None]] = []

    def emit(self, event: Any) -> None:
        """Record ``event`` and pass it to each subscriber in order.

        A subscriber that raises is logged and skipped; the event stays
        recorded and the remaining subscribers still receive it.
        """
        self._events.append(event)
        logger.debug("Event %s%s", type(event).__name__, as_tuple(event))
        for callback in self._subscribers:
            try:
                callback(event)
            except Exception:
                logger.warning(
                    "Event subscriber %r failed on %s",
                    callback,
                    type(event).__name__,
                    exc_info=True,
                )

    def subscribe(self, callback: Callable[[Any], None]) -> None:
        self._subscribers.append(callback)

    def of_type(self, event_type: type) -> list[Any]:
        return [e for e in self._events if isinstance(e, event_type)]

    @property
    def last(self) -> Any | None:
        return self._events[-1] if self._events else None

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._events))

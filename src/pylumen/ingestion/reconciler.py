"""Per-device coalescing of inbound updates.

A device acknowledges every ``lighting/set`` it receives, so dragging a
colour wheel produces a burst of ``lighting/status`` echoes. Only the last
one matters. The first message of a burst opens a fixed window; later
messages only overwrite the pending value and never extend the window.
When the window closes the latest value is committed once.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Hashable
from typing import Generic, TypeVar

from pylumen._constants import DEBOUNCE_WINDOW_SECONDS

_logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class InboundReconciler(Generic[K, V]):
    """Fixed-window coalescer keyed by device.

    ``commit`` is read at fire time, so swapping it after construction
    takes effect for timers that are already running.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        commit: Callable[[K, V], None],
        window: float = DEBOUNCE_WINDOW_SECONDS,
    ) -> None:
        self._loop = loop
        self.commit = commit
        self._window = window
        self._pending: dict[K, V] = {}
        self._timers: dict[K, asyncio.TimerHandle] = {}

    @property
    def window(self) -> float:
        return self._window

    def submit(self, key: K, value: V) -> None:
        """Record *value* as the latest for *key*, opening a window if idle."""
        self._pending[key] = value
        if key in self._timers:
            return
        self._timers[key] = self._loop.call_later(self._window, self._flush, key)

    def _flush(self, key: K) -> None:
        self._timers.pop(key, None)
        if key not in self._pending:
            return
        value = self._pending.pop(key)
        _logger.debug("Committing coalesced value for key=%s", key)
        self.commit(key, value)

    def pending(self, key: K) -> V | None:
        return self._pending.get(key)

    def is_waiting(self, key: K) -> bool:
        return key in self._timers

    def cancel_all(self) -> None:
        """Cancel every open window and drop pending values."""
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        self._pending.clear()

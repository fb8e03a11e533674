"""Per-device rate limiting of outbound ``lighting/set`` publishes.

Dragging a colour wheel can request dozens of changes per second. Each
device gets at most one publish per interval: a request arriving after a
quiet period is sent immediately, and requests arriving inside the
interval collapse into one trailing send carrying the newest value.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Hashable
from typing import Generic, TypeVar

from pylumen._constants import THROTTLE_INTERVAL_SECONDS

_logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class OutboundThrottler(Generic[K, V]):
    """Leading + trailing throttle keyed by device.

    ``send`` is read at fire time, like the reconciler's ``commit``.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        send: Callable[[K, V], None],
        interval: float = THROTTLE_INTERVAL_SECONDS,
    ) -> None:
        self._loop = loop
        self.send = send
        self._interval = interval
        self._last_sent: dict[K, float] = {}
        self._pending: dict[K, V] = {}
        self._timers: dict[K, asyncio.TimerHandle] = {}

    @property
    def interval(self) -> float:
        return self._interval

    def request(self, key: K, value: V) -> None:
        """Ask for *value* to be sent for *key* as soon as the rate allows."""
        self._pending[key] = value
        if key in self._timers:
            return

        now = self._loop.time()
        last = self._last_sent.get(key)
        elapsed = None if last is None else now - last
        if elapsed is None or elapsed >= self._interval:
            self._send_pending(key, now)
            return

        delay = self._interval - elapsed
        self._timers[key] = self._loop.call_later(delay, self._fire, key)

    def _fire(self, key: K) -> None:
        self._timers.pop(key, None)
        self._send_pending(key, self._loop.time())

    def _send_pending(self, key: K, now: float) -> None:
        if key not in self._pending:
            return
        value = self._pending.pop(key)
        self._last_sent[key] = now
        _logger.debug("Sending throttled value for key=%s", key)
        self.send(key, value)

    def pending(self, key: K) -> V | None:
        return self._pending.get(key)

    def is_scheduled(self, key: K) -> bool:
        return key in self._timers

    def cancel_all(self) -> None:
        """Cancel scheduled sends; pending values are discarded."""
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        self._pending.clear()

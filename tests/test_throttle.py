from __future__ import annotations

import math
from typing import Any

import pytest

from pylumen._client.throttle import OutboundThrottler
from pylumen.models.lighting import ColourLighting


def _throttler(loop: Any, interval: float = 0.02) -> tuple[OutboundThrottler[str, Any], list[tuple[float, str, Any]]]:
    sent: list[tuple[float, str, Any]] = []
    throttler: OutboundThrottler[str, Any] = OutboundThrottler(
        loop=loop,
        send=lambda key, value: sent.append((loop.time(), key, value)),
        interval=interval,
    )
    return throttler, sent


def test_leading_send_then_trailing_latest(manual_loop: Any) -> None:
    throttler, sent = _throttler(manual_loop)
    red = ColourLighting(colour="#ff0000")
    green = ColourLighting(colour="#00ff00")

    throttler.request("Ben", red)
    assert sent == [(0.0, "Ben", red)]

    manual_loop.advance(0.005)
    throttler.request("Ben", green)
    assert len(sent) == 1
    assert throttler.is_scheduled("Ben")

    manual_loop.advance(0.015)
    assert sent == [(0.0, "Ben", red), (pytest.approx(0.02), "Ben", green)]

    manual_loop.advance(1.0)
    assert len(sent) == 2


def test_trailing_send_carries_newest_value(manual_loop: Any) -> None:
    throttler, sent = _throttler(manual_loop)

    throttler.request("Ben", 0)
    for value in range(1, 5):
        manual_loop.advance(0.003)
        throttler.request("Ben", value)

    manual_loop.advance(0.02)
    assert [value for _, _, value in sent] == [0, 4]


def test_idle_request_after_interval_sends_immediately(manual_loop: Any) -> None:
    throttler, sent = _throttler(manual_loop)

    throttler.request("Ben", "a")
    manual_loop.advance(0.05)
    throttler.request("Ben", "b")

    assert [value for _, _, value in sent] == ["a", "b"]
    assert sent[1][0] == pytest.approx(0.05)


def test_at_most_one_send_per_interval(manual_loop: Any) -> None:
    interval = 0.02
    throttler, sent = _throttler(manual_loop, interval=interval)

    requests = 60
    step = 0.0015
    for value in range(requests):
        throttler.request("Ben", value)
        manual_loop.advance(step)
    elapsed = manual_loop.time()
    manual_loop.advance(interval)

    assert len(sent) <= math.ceil(elapsed / interval) + 1
    assert sent[-1][2] == requests - 1
    times = [t for t, _, _ in sent]
    assert all(b - a >= interval - 1e-9 for a, b in zip(times, times[1:], strict=False))


def test_devices_are_throttled_independently(manual_loop: Any) -> None:
    throttler, sent = _throttler(manual_loop)

    throttler.request("Ben", "ben-1")
    throttler.request("Roo", "roo-1")
    throttler.request("Ben", "ben-2")

    assert [(key, value) for _, key, value in sent] == [("Ben", "ben-1"), ("Roo", "roo-1")]
    manual_loop.advance(0.02)
    assert [(key, value) for _, key, value in sent][-1] == ("Ben", "ben-2")


def test_cancel_all_prevents_trailing_send(manual_loop: Any) -> None:
    throttler, sent = _throttler(manual_loop)

    throttler.request("Ben", "first")
    throttler.request("Ben", "second")
    throttler.cancel_all()
    manual_loop.advance(1.0)

    assert [value for _, _, value in sent] == ["first"]
    assert throttler.pending("Ben") is None

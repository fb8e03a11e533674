from __future__ import annotations

import itertools
from collections.abc import Callable
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any

import pytest

from pylumen.config import LumenConfig


class ManualTimerHandle:
    def __init__(self, when: float, seq: int, callback: Callable[..., None], args: tuple[Any, ...]) -> None:
        self.when = when
        self.seq = seq
        self._callback = callback
        self._args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def run(self) -> None:
        self._callback(*self._args)


class ManualLoop:
    """Just enough of an event loop for timer-driven components.

    Time only moves when ``advance`` is called, so tests are exact.
    """

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self._seq = itertools.count()
        self._handles: list[ManualTimerHandle] = []

    def time(self) -> float:
        return self.now

    def call_later(self, delay: float, callback: Callable[..., None], *args: Any) -> ManualTimerHandle:
        handle = ManualTimerHandle(self.now + delay, next(self._seq), callback, args)
        self._handles.append(handle)
        return handle

    def pending_timers(self) -> int:
        return sum(1 for h in self._handles if not h.cancelled())

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self._handles if not h.cancelled() and h.when <= target + 1e-12]
            if not due:
                break
            handle = min(due, key=lambda h: (h.when, h.seq))
            self._handles.remove(handle)
            self.now = max(self.now, handle.when)
            handle.run()
        self.now = target


@dataclass
class FakeReasonCode:
    value: int = 0

    @property
    def is_failure(self) -> bool:
        return self.value >= 0x80

    def __str__(self) -> str:
        return "Success" if self.value == 0 else f"Failure({self.value})"


@dataclass
class FakeMqttClient:
    """Stands in for ``paho.mqtt.client.Client`` in tests."""

    config: LumenConfig
    connect_calls: list[tuple[str, int, int]] = field(default_factory=list)
    subscriptions: list[tuple[str, int]] = field(default_factory=list)
    published: list[tuple[str, bytes, int, bool]] = field(default_factory=list)
    loop_started: bool = False
    loop_stopped: bool = False
    disconnected: bool = False
    publish_rc: int = 0
    on_connect: Any = None
    on_connect_fail: Any = None
    on_disconnect: Any = None
    on_message: Any = None

    def connect_async(self, host: str, port: int, keepalive: int = 60) -> None:
        self.connect_calls.append((host, port, keepalive))

    def loop_start(self) -> None:
        self.loop_started = True

    def loop_stop(self) -> None:
        self.loop_stopped = True

    def disconnect(self) -> None:
        self.disconnected = True

    def subscribe(self, topic: str, qos: int = 0) -> None:
        self.subscriptions.append((topic, qos))

    def publish(self, topic: str, payload: bytes, qos: int = 0, retain: bool = False) -> SimpleNamespace:
        self.published.append((topic, payload, qos, retain))
        return SimpleNamespace(rc=self.publish_rc)

    # Simulated network-thread events

    def fire_connect(self, rc: int = 0) -> None:
        self.on_connect(self, None, {}, FakeReasonCode(rc), None)

    def fire_connect_fail(self) -> None:
        self.on_connect_fail(self, None)

    def fire_disconnect(self, rc: int = 0) -> None:
        self.on_disconnect(self, None, None, FakeReasonCode(rc), None)

    def fire_message(self, topic: str, payload: bytes) -> None:
        self.on_message(self, None, SimpleNamespace(topic=topic, payload=payload))


class FakeClientFactory:
    def __init__(self) -> None:
        self.clients: list[FakeMqttClient] = []

    def __call__(self, config: LumenConfig) -> FakeMqttClient:
        client = FakeMqttClient(config=config)
        self.clients.append(client)
        return client

    @property
    def client(self) -> FakeMqttClient:
        return self.clients[-1]


@pytest.fixture
def manual_loop() -> ManualLoop:
    return ManualLoop()


@pytest.fixture
def fake_factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture
def config() -> LumenConfig:
    return LumenConfig(
        root_topic="root-token",
        devices=("Ben", "Roo"),
        client_id="lumen-test",
        debounce_window=0.05,
        throttle_interval=0.02,
    )

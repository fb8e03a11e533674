from __future__ import annotations

import asyncio
from typing import Any

import pytest

from pylumen._mqtt import ConnectionManager, ConnectionState
from pylumen.config import LumenConfig


def _manager(config: LumenConfig, factory: Any, **kwargs: Any) -> tuple[ConnectionManager, list[Any], list[Any]]:
    messages: list[Any] = []
    states: list[Any] = []
    manager = ConnectionManager(
        loop=asyncio.get_running_loop(),
        config=config,
        on_message=lambda topic, payload: messages.append((topic, payload)),
        on_state_change=states.append,
        client_factory=factory,
        **kwargs,
    )
    return manager, messages, states


@pytest.mark.asyncio
async def test_start_connects_and_subscribes_on_connect(config: LumenConfig, fake_factory: Any) -> None:
    manager, _messages, states = _manager(config, fake_factory)
    assert manager.state is ConnectionState.DISCONNECTED

    manager.start()
    client = fake_factory.client
    assert client.connect_calls == [(config.broker_host, config.broker_port, config.keepalive)]
    assert client.loop_started
    assert manager.state is ConnectionState.CONNECTING

    client.fire_connect()
    await asyncio.sleep(0)

    assert manager.is_connected
    assert client.subscriptions == [("root-token/#", 1)]
    assert states == [ConnectionState.CONNECTING, ConnectionState.CONNECTED]


@pytest.mark.asyncio
async def test_reconnect_resubscribes_without_double_dispatch(config: LumenConfig, fake_factory: Any) -> None:
    manager, messages, states = _manager(config, fake_factory)
    manager.start()
    manager.start()
    client = fake_factory.client

    client.fire_connect()
    client.fire_disconnect(rc=0x87)
    client.fire_connect()
    await asyncio.sleep(0)

    assert len(fake_factory.clients) == 1
    assert client.config.client_id == "lumen-test"
    assert client.subscriptions == [("root-token/#", 1), ("root-token/#", 1)]
    assert states[-3:] == [ConnectionState.CONNECTED, ConnectionState.CONNECTING, ConnectionState.CONNECTED]

    client.fire_message("root-token/Ben/status", b"{}")
    await asyncio.sleep(0)
    assert messages == [("root-token/Ben/status", b"{}")]


@pytest.mark.asyncio
async def test_connect_failures_stay_in_connecting(config: LumenConfig, fake_factory: Any) -> None:
    manager, _messages, _states = _manager(config, fake_factory)
    manager.start()
    client = fake_factory.client

    client.fire_connect_fail()
    client.fire_connect(rc=0x86)
    await asyncio.sleep(0)

    assert manager.state is ConnectionState.CONNECTING
    assert client.subscriptions == []


@pytest.mark.asyncio
async def test_publish_is_qos1_and_respects_retain(config: LumenConfig, fake_factory: Any) -> None:
    manager, _messages, _states = _manager(config, fake_factory)

    manager.publish("root-token/Ben/lighting/set", b"{}")
    assert fake_factory.clients == []

    manager.start()
    manager.publish("root-token/Ben/lighting/set", b"a")
    manager.publish("root-token/Ben/lighting/set", b"b", retain=True)
    fake_factory.client.publish_rc = 4
    manager.publish("root-token/Ben/lighting/set", b"c")

    assert fake_factory.client.published == [
        ("root-token/Ben/lighting/set", b"a", 1, False),
        ("root-token/Ben/lighting/set", b"b", 1, True),
        ("root-token/Ben/lighting/set", b"c", 1, False),
    ]


@pytest.mark.asyncio
async def test_stop_is_terminal(config: LumenConfig, fake_factory: Any) -> None:
    manager, messages, states = _manager(config, fake_factory)
    manager.start()
    client = fake_factory.client
    client.fire_connect()
    await asyncio.sleep(0)

    manager.stop()
    assert client.disconnected
    assert client.loop_stopped
    assert manager.state is ConnectionState.CLOSED

    client.fire_disconnect()
    client.fire_message("root-token/Ben/status", b"{}")
    await asyncio.sleep(0)
    assert manager.state is ConnectionState.CLOSED
    assert messages == []
    assert states[-1] is ConnectionState.CLOSED

    manager.start()
    assert len(fake_factory.clients) == 1


@pytest.mark.asyncio
async def test_message_handler_is_read_at_dispatch_time(config: LumenConfig, fake_factory: Any) -> None:
    manager, messages, _states = _manager(config, fake_factory, subscription="root-token/+/lighting/set")
    manager.start()
    client = fake_factory.client
    client.fire_connect()

    replacement: list[Any] = []
    client.fire_message("root-token/Ben/lighting/set", b"x")
    manager.on_message = lambda topic, payload: replacement.append(topic)
    await asyncio.sleep(0)

    assert client.subscriptions == [("root-token/+/lighting/set", 1)]
    assert messages == []
    assert replacement == ["root-token/Ben/lighting/set"]

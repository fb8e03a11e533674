"""Internal MQTT connection management.

paho-mqtt runs its network loop on its own thread. Every callback from
that thread is handed to the asyncio loop with ``call_soon_threadsafe``
before any pylumen state is touched.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any, cast

import paho.mqtt.client as mqtt

from pylumen._constants import MQTT_QOS
from pylumen.config import LumenConfig
from pylumen.topics import root_wildcard

_logger = logging.getLogger(__name__)

MessageHandler = Callable[[str, bytes], None]
ClientFactory = Callable[[LumenConfig], Any]


class ConnectionState(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSED = "closed"


def build_paho_client(config: LumenConfig) -> mqtt.Client:
    """Create a paho client configured for *config*.

    Reconnects are left to paho with a fixed delay (``min == max``), so a
    dropped connection is retried forever at the same pace.
    """
    client = mqtt.Client(
        callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
        client_id=config.client_id,
        transport=config.transport,
        protocol=mqtt.MQTTv311,
    )
    client.enable_logger(_logger)
    if config.transport == "websockets":
        client.ws_set_options(path=config.ws_path)
    if config.tls:
        client.tls_set()
    delay = cast(Any, config.reconnect_delay)
    client.reconnect_delay_set(min_delay=delay, max_delay=delay)
    return client


class ConnectionManager:
    """Owns the MQTT session for one pylumen client.

    ``on_message`` and ``on_state_change`` are plain attributes read at
    dispatch time, so callers may swap them while connected.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        config: LumenConfig,
        on_message: MessageHandler | None = None,
        on_state_change: Callable[[ConnectionState], None] | None = None,
        subscription: str | None = None,
        client_factory: ClientFactory = build_paho_client,
    ) -> None:
        self._loop = loop
        self._config = config
        self.on_message = on_message
        self.on_state_change = on_state_change
        self._subscription = subscription or root_wildcard(config.root_topic)
        self._client_factory = client_factory
        self._client: Any = None
        self._state = ConnectionState.DISCONNECTED

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def client_id(self) -> str:
        return self._config.client_id

    @property
    def subscription(self) -> str:
        return self._subscription

    def _set_state(self, state: ConnectionState) -> None:
        if self._state is ConnectionState.CLOSED or self._state is state:
            return
        _logger.debug("MQTT state %s -> %s", self._state, state)
        self._state = state
        callback = self.on_state_change
        if callback is not None:
            callback(state)

    def _post(self, callback: Callable[..., None], *args: Any) -> None:
        """Schedule *callback* on the event loop from the paho thread."""
        try:
            self._loop.call_soon_threadsafe(callback, *args)
        except RuntimeError:
            _logger.debug("Event loop closed; dropping MQTT callback", exc_info=True)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin connecting. Calling start twice is a no-op."""
        if self._client is not None or self._state is ConnectionState.CLOSED:
            return

        client = self._client_factory(self._config)
        client.on_connect = self._on_connect
        client.on_connect_fail = self._on_connect_fail
        client.on_disconnect = self._on_disconnect
        client.on_message = self._on_message
        self._client = client

        _logger.debug(
            "MQTT start host=%s port=%s transport=%s client_id=%s",
            self._config.broker_host,
            self._config.broker_port,
            self._config.transport,
            self._config.client_id,
        )
        self._set_state(ConnectionState.CONNECTING)
        client.connect_async(self._config.broker_host, self._config.broker_port, keepalive=self._config.keepalive)
        client.loop_start()

    def stop(self) -> None:
        """Disconnect for good; pending reconnect attempts are abandoned."""
        client = self._client
        self._client = None
        self._set_state(ConnectionState.CLOSED)
        if client is None:
            return
        try:
            client.disconnect()
        finally:
            client.loop_stop()
            _logger.debug("MQTT network loop stopped")

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def publish(self, topic: str, payload: bytes, *, retain: bool = False) -> None:
        """Fire-and-forget publish at QoS 1."""
        client = self._client
        if client is None:
            _logger.debug("Dropping publish to topic=%s: connection not started", topic)
            return
        info = client.publish(topic, payload, qos=MQTT_QOS, retain=retain)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            _logger.debug("Publish to topic=%s returned rc=%s", topic, info.rc)

    # ------------------------------------------------------------------
    # paho callbacks (network thread)
    # ------------------------------------------------------------------

    def _on_connect(
        self,
        client: Any,
        _userdata: Any,
        _flags: Any,
        reason_code: Any,
        _properties: Any,
    ) -> None:
        if reason_code.is_failure:
            _logger.warning("MQTT connect failed: %s", reason_code)
            self._post(self._set_state, ConnectionState.CONNECTING)
            return
        _logger.debug("MQTT connected; subscribing topic=%s", self._subscription)
        client.subscribe(self._subscription, qos=MQTT_QOS)
        self._post(self._set_state, ConnectionState.CONNECTED)

    def _on_connect_fail(self, _client: Any, _userdata: Any) -> None:
        _logger.warning(
            "MQTT connection to %s:%s failed; retrying in %ss",
            self._config.broker_host,
            self._config.broker_port,
            self._config.reconnect_delay,
        )
        self._post(self._set_state, ConnectionState.CONNECTING)

    def _on_disconnect(
        self,
        _client: Any,
        _userdata: Any,
        _disconnect_flags: Any,
        reason_code: Any,
        _properties: Any,
    ) -> None:
        if self._state is ConnectionState.CLOSED:
            return
        _logger.info("MQTT disconnected (%s); reconnecting in %ss", reason_code, self._config.reconnect_delay)
        self._post(self._set_state, ConnectionState.CONNECTING)

    def _on_message(self, _client: Any, _userdata: Any, msg: Any) -> None:
        self._post(self._dispatch, msg.topic, bytes(msg.payload))

    def _dispatch(self, topic: str, payload: bytes) -> None:
        if self._state is ConnectionState.CLOSED:
            return
        handler = self.on_message
        if handler is not None:
            handler(topic, payload)

"""High-level async client tying the sync layer together."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pylumen._client.throttle import OutboundThrottler
from pylumen._constants import RAINBOW_SPEED_MAX, RAINBOW_SPEED_MIN, STROBE_SPEED_MAX, STROBE_SPEED_MIN, clamp_speed
from pylumen._mqtt import ClientFactory, ConnectionManager, ConnectionState, build_paho_client
from pylumen.codec import LightingValue, encode_lighting
from pylumen.config import LumenConfig
from pylumen.exceptions import LumenNotConnectedError, LumenUnknownDeviceError
from pylumen.ingestion.mqtt import LightingUpdate, StatusUpdate, build_update
from pylumen.ingestion.reconciler import InboundReconciler
from pylumen.models.lighting import ColourLighting, LightingMode, RainbowLighting, StrobeLighting
from pylumen.models.status import StatusReport
from pylumen.state import liveness
from pylumen.state.events import StateChange
from pylumen.state.record import DeviceRecord
from pylumen.state.store import DeviceStateStore, StateListener
from pylumen.topics import lighting_set_topic

_logger = logging.getLogger(__name__)


class LumenClient:
    """Async client keeping the device fleet and the local store in sync.

    Usage::

        async with LumenClient(config) as client:
            client.toggle_selected("Ben")
            client.apply_to_selected(ColourLighting(colour="#ff0000"))

    All methods must be called from the event loop that entered the
    context manager.
    """

    def __init__(
        self,
        config: LumenConfig | None = None,
        *,
        client_factory: ClientFactory | None = None,
        on_change: StateListener | None = None,
    ) -> None:
        self._config = (config or LumenConfig()).validate()
        self._client_factory = client_factory or build_paho_client
        self.on_change = on_change
        self._store = DeviceStateStore(self._config.devices)
        self._store.add_listener(self._notify_change)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._reconciler: InboundReconciler[str, LightingValue] | None = None
        self._throttler: OutboundThrottler[str, LightingValue] | None = None
        self._connection: ConnectionManager | None = None
        self._final_state = ConnectionState.DISCONNECTED

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> LumenClient:
        loop = asyncio.get_running_loop()
        self._loop = loop
        _logger.debug("Starting session client_id=%s root=%s", self._config.client_id, self._config.root_topic)
        self._reconciler = InboundReconciler(
            loop=loop,
            commit=self._commit_lighting,
            window=self._config.debounce_window,
        )
        self._throttler = OutboundThrottler(
            loop=loop,
            send=self._publish_lighting,
            interval=self._config.throttle_interval,
        )
        self._connection = ConnectionManager(
            loop=loop,
            config=self._config,
            on_message=self._on_mqtt_message,
            client_factory=self._client_factory,
        )
        self._connection.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        # Timers go first so none can fire against a closed session.
        if self._reconciler is not None:
            self._reconciler.cancel_all()
        if self._throttler is not None:
            self._throttler.cancel_all()
        connection = self._connection
        self._connection = None
        if connection is not None:
            self._final_state = ConnectionState.CLOSED
            # paho joins its network thread in loop_stop.
            await asyncio.get_running_loop().run_in_executor(None, connection.stop)
        self._reconciler = None
        self._throttler = None
        self._loop = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_throttler(self) -> OutboundThrottler[str, LightingValue]:
        if self._throttler is None:
            raise LumenNotConnectedError("Client not started. Use 'async with LumenClient(...) as client:'")
        return self._throttler

    def _require_device(self, device: str) -> None:
        if device not in self._store:
            raise LumenUnknownDeviceError(device)

    def _notify_change(self, change: StateChange) -> None:
        callback = self.on_change
        if callback is not None:
            callback(change)

    def _on_mqtt_message(self, topic: str, payload: bytes) -> None:
        update = build_update(
            topic,
            payload,
            root=self._config.root_topic,
            devices=self._config.known_devices,
        )
        if isinstance(update, LightingUpdate):
            if self._reconciler is not None:
                self._reconciler.submit(update.device, update.lighting)
        elif isinstance(update, StatusUpdate):
            self._store.set_status(update.device, update.status)

    def _commit_lighting(self, device: str, lighting: LightingValue) -> None:
        self._store.set_lighting(device, lighting)

    def _publish_lighting(self, device: str, lighting: LightingValue) -> None:
        connection = self._connection
        if connection is None:
            return
        connection.publish(
            lighting_set_topic(self._config.root_topic, device),
            encode_lighting(lighting),
            retain=self._config.retain_lighting_set,
        )

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def config(self) -> LumenConfig:
        return self._config

    @property
    def store(self) -> DeviceStateStore:
        return self._store

    @property
    def state(self) -> dict[str, DeviceRecord]:
        """Snapshot of every device record."""
        return self._store.snapshot()

    @property
    def connection_state(self) -> ConnectionState:
        if self._connection is None:
            return self._final_state
        return self._connection.state

    def is_online(self, device: str, now: float | None = None) -> bool:
        return liveness.is_online(self._store[device].status, now, threshold=self._config.offline_threshold)

    def visible_status(self, device: str, now: float | None = None) -> StatusReport | None:
        """Latest telemetry for *device*, or ``None`` while it is offline."""
        return liveness.visible_status(self._store[device].status, now, threshold=self._config.offline_threshold)

    # ------------------------------------------------------------------
    # UI intents
    # ------------------------------------------------------------------

    def set_lighting(self, device: str, lighting: LightingValue) -> DeviceRecord:
        """Set the desired lighting locally and publish it, rate limited."""
        throttler = self._require_throttler()
        self._require_device(device)
        record = self._store.set_lighting(device, lighting)
        throttler.request(device, lighting)
        return record

    def apply_to_selected(self, lighting: LightingValue) -> tuple[str, ...]:
        """Apply *lighting* to every selected device; returns the devices touched."""
        self._require_throttler()
        selected = self._store.selected_devices()
        targets = tuple(name for name in self._store.devices if name in selected)
        for device in targets:
            self.set_lighting(device, lighting)
        return targets

    def switch_mode(self, device: str, mode: LightingMode | str) -> DeviceRecord:
        """Switch *device* to *mode*, restoring its last value for that mode."""
        self._require_device(device)
        return self.set_lighting(device, self._store.lighting_for_mode(device, mode))

    def set_colour(self, device: str, colour: str) -> DeviceRecord:
        """Change the colour of a device in colour or strobe mode."""
        current = self._store[device].lighting
        if isinstance(current, RainbowLighting):
            raise ValueError(f"device {device!r} is in rainbow mode, which has no colour")
        return self.set_lighting(device, current.model_copy(update={"colour": colour}))

    def set_speed(self, device: str, speed: float) -> DeviceRecord:
        """Change the speed of a device in rainbow or strobe mode, clamped to the mode's range."""
        current = self._store[device].lighting
        if isinstance(current, ColourLighting):
            raise ValueError(f"device {device!r} is in colour mode, which has no speed")
        if isinstance(current, StrobeLighting):
            clamped = clamp_speed(speed, STROBE_SPEED_MIN, STROBE_SPEED_MAX)
        else:
            clamped = clamp_speed(speed, RAINBOW_SPEED_MIN, RAINBOW_SPEED_MAX)
        return self.set_lighting(device, current.model_copy(update={"speed": clamped}))

    def toggle_selected(self, device: str) -> DeviceRecord:
        return self._store.toggle_selected(device)

    def set_selected(self, device: str, selected: bool) -> DeviceRecord:
        return self._store.set_selected(device, selected)

"""Client configuration for pylumen."""

from __future__ import annotations

import dataclasses
import os
import uuid
from typing import Any, Literal

from pylumen._constants import (
    BROKER_HOST,
    BROKER_PORT,
    BROKER_WS_PATH,
    DEBOUNCE_WINDOW_SECONDS,
    KNOWN_DEVICES,
    MQTT_KEEPALIVE,
    OFFLINE_THRESHOLD_SECONDS,
    RECONNECT_DELAY_SECONDS,
    ROOT_TOPIC,
    THROTTLE_INTERVAL_SECONDS,
)
from pylumen.exceptions import LumenConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_devices(value: str) -> tuple[str, ...]:
    return tuple(name.strip() for name in value.split(",") if name.strip())


def generate_client_id() -> str:
    """Return a fresh MQTT client id, chosen once per session."""
    return f"lumen-{uuid.uuid4()}"


@dataclasses.dataclass(frozen=True)
class LumenConfig:
    """Client configuration.

    Parameters
    ----------
    broker_host : str
        MQTT broker host name.
    broker_port : int
        MQTT broker port.
    transport : {"websockets", "tcp"}
        Socket transport used by paho-mqtt.
    ws_path : str
        Websocket path, only used with the ``websockets`` transport.
    tls : bool
        Enable TLS with the system CA bundle.
    root_topic : str
        Shared namespace token prefixed to every topic.
    devices : tuple of str
        The fixed set of known device names.
    client_id : str
        MQTT client id. Generated once per config and reused on every
        reconnect so the broker sees one continuous session.
    keepalive : int
        MQTT keepalive in seconds.
    reconnect_delay : float
        Fixed delay in seconds between reconnect attempts.
    debounce_window : float
        Coalescing window for inbound ``lighting/status`` bursts.
    throttle_interval : float
        Minimum spacing between ``lighting/set`` publishes per device.
    offline_threshold : float
        Seconds after a status report's timestamp before a device counts
        as offline.
    retain_lighting_set : bool
        Publish ``lighting/set`` with the retained flag. Off by default:
        the local store is the source of truth for desired state.
    """

    broker_host: str = BROKER_HOST
    broker_port: int = BROKER_PORT
    transport: Literal["websockets", "tcp"] = "websockets"
    ws_path: str = BROKER_WS_PATH
    tls: bool = True
    root_topic: str = ROOT_TOPIC
    devices: tuple[str, ...] = KNOWN_DEVICES
    client_id: str = dataclasses.field(default_factory=generate_client_id)
    keepalive: int = MQTT_KEEPALIVE
    reconnect_delay: float = RECONNECT_DELAY_SECONDS
    debounce_window: float = DEBOUNCE_WINDOW_SECONDS
    throttle_interval: float = THROTTLE_INTERVAL_SECONDS
    offline_threshold: float = OFFLINE_THRESHOLD_SECONDS
    retain_lighting_set: bool = False

    def validate(self) -> LumenConfig:
        """Raise :class:`LumenConfigError` for unusable values, else return self."""
        if not self.root_topic.strip() or "/" in self.root_topic:
            raise LumenConfigError(f"root_topic must be a single non-empty topic level, got {self.root_topic!r}")
        if not self.devices:
            raise LumenConfigError("devices must name at least one device")
        for name in self.devices:
            if not name or any(ch in name for ch in "/+#"):
                raise LumenConfigError(f"invalid device name {name!r}")
        if len(set(self.devices)) != len(self.devices):
            raise LumenConfigError("device names must be unique")
        if self.transport not in ("websockets", "tcp"):
            raise LumenConfigError(f"transport must be 'websockets' or 'tcp', got {self.transport!r}")
        for field_name in ("reconnect_delay", "debounce_window", "throttle_interval", "offline_threshold"):
            if getattr(self, field_name) <= 0:
                raise LumenConfigError(f"{field_name} must be positive")
        return self

    @property
    def known_devices(self) -> frozenset[str]:
        return frozenset(self.devices)

    @classmethod
    def from_env(cls, **overrides: Any) -> LumenConfig:
        """Create configuration from environment variables.

        Reads optional ``LUMEN_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        LumenConfig
            Populated and validated configuration.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "LUMEN_BROKER_HOST": "broker_host",
            "LUMEN_TRANSPORT": "transport",
            "LUMEN_WS_PATH": "ws_path",
            "LUMEN_ROOT_TOPIC": "root_topic",
            "LUMEN_CLIENT_ID": "client_id",
        }
        _ENV_FLOAT_MAP = {
            "LUMEN_RECONNECT_DELAY": "reconnect_delay",
            "LUMEN_DEBOUNCE_WINDOW": "debounce_window",
            "LUMEN_THROTTLE_INTERVAL": "throttle_interval",
            "LUMEN_OFFLINE_THRESHOLD": "offline_threshold",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        try:
            for env_key, field_name in _ENV_FLOAT_MAP.items():
                val = env.get(env_key)
                if val is not None:
                    config_kwargs[field_name] = float(val)

            port_env = env.get("LUMEN_BROKER_PORT")
            if port_env is not None:
                config_kwargs["broker_port"] = int(port_env)

            keepalive_env = env.get("LUMEN_KEEPALIVE")
            if keepalive_env is not None:
                config_kwargs["keepalive"] = int(keepalive_env)
        except ValueError as exc:
            raise LumenConfigError(f"Invalid numeric environment value: {exc}") from exc

        devices_env = env.get("LUMEN_DEVICES")
        if devices_env is not None:
            config_kwargs["devices"] = _env_devices(devices_env)

        config_kwargs["tls"] = _env_bool(env.get("LUMEN_TLS"), True)
        config_kwargs["retain_lighting_set"] = _env_bool(env.get("LUMEN_RETAIN_LIGHTING_SET"), False)

        config_kwargs.update(overrides)
        if isinstance(config_kwargs.get("devices"), list):
            config_kwargs["devices"] = tuple(config_kwargs["devices"])

        return cls(**config_kwargs).validate()

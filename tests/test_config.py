from __future__ import annotations

import pytest

from pylumen.config import LumenConfig
from pylumen.exceptions import LumenConfigError


def test_defaults() -> None:
    config = LumenConfig()

    assert config.broker_host == "broker.hivemq.com"
    assert config.broker_port == 8884
    assert config.transport == "websockets"
    assert config.devices == ("Ben", "Roo")
    assert config.known_devices == frozenset({"Ben", "Roo"})
    assert config.debounce_window == 0.5
    assert config.reconnect_delay == 5.0
    assert config.offline_threshold == 40.0
    assert config.retain_lighting_set is False
    assert config.client_id.startswith("lumen-")


def test_client_id_is_chosen_once_per_config() -> None:
    first = LumenConfig()
    second = LumenConfig()

    assert first.client_id == first.client_id
    assert first.client_id != second.client_id


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LUMEN_BROKER_HOST", "localhost")
    monkeypatch.setenv("LUMEN_BROKER_PORT", "1883")
    monkeypatch.setenv("LUMEN_TRANSPORT", "tcp")
    monkeypatch.setenv("LUMEN_TLS", "off")
    monkeypatch.setenv("LUMEN_DEVICES", "Ben, Roo ,Kit")
    monkeypatch.setenv("LUMEN_THROTTLE_INTERVAL", "0.05")
    monkeypatch.setenv("LUMEN_RETAIN_LIGHTING_SET", "yes")

    config = LumenConfig.from_env(root_topic="abc")

    assert config.broker_host == "localhost"
    assert config.broker_port == 1883
    assert config.transport == "tcp"
    assert config.tls is False
    assert config.devices == ("Ben", "Roo", "Kit")
    assert config.throttle_interval == 0.05
    assert config.retain_lighting_set is True
    assert config.root_topic == "abc"


def test_from_env_rejects_bad_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LUMEN_BROKER_PORT", "eighty")
    with pytest.raises(LumenConfigError):
        LumenConfig.from_env()


@pytest.mark.parametrize(
    "overrides",
    [
        {"devices": ()},
        {"devices": ("Ben", "Ben")},
        {"devices": ("Ben/Roo",)},
        {"root_topic": ""},
        {"root_topic": "a/b"},
        {"debounce_window": 0},
        {"throttle_interval": -1},
        {"transport": "udp"},
    ],
)
def test_validate_rejects_bad_values(overrides: dict) -> None:
    with pytest.raises(LumenConfigError):
        LumenConfig(**overrides).validate()

"""Device-side echo logic used by the bounce simulator.

A real device answers every ``lighting/set`` with a retained
``lighting/status`` carrying the state it applied, and publishes
telemetry on ``status`` every few seconds. :class:`EchoResponder` does
the same without hardware, so the UI side can be exercised end to end.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Collection
from dataclasses import dataclass

from pylumen.codec import decode_lighting, encode_lighting, encode_status
from pylumen.exceptions import LumenDecodeError
from pylumen.models.status import StatusReport
from pylumen.topics import device_status_topic, lighting_status_topic, parse_lighting_set_topic

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutboundMessage:
    topic: str
    payload: bytes
    retain: bool


class EchoResponder:
    """Turns ``lighting/set`` commands into ``lighting/status`` echoes.

    When *devices* is given, commands for other device names are ignored;
    otherwise any device token is echoed.
    """

    def __init__(self, root: str, devices: Collection[str] | None = None) -> None:
        self._root = root
        self._devices = frozenset(devices) if devices is not None else None
        self.echoed = 0
        self.rejected = 0

    def handle(self, topic: str, payload: bytes) -> OutboundMessage | None:
        device = parse_lighting_set_topic(topic, root=self._root)
        if device is None:
            return None
        if self._devices is not None and device not in self._devices:
            _logger.debug("Ignoring lighting/set for unknown device=%s", device)
            return None
        try:
            lighting = decode_lighting(payload)
        except LumenDecodeError as exc:
            self.rejected += 1
            _logger.info("Received invalid lighting payload for device=%s (%s), ignoring", device, exc.reason)
            return None

        self.echoed += 1
        _logger.info("Bounced lighting/set to lighting/status for device=%s", device)
        return OutboundMessage(
            topic=lighting_status_topic(self._root, device),
            payload=encode_lighting(lighting),
            retain=True,
        )


def make_status_report(
    *,
    started_at: float,
    now: float | None = None,
    battery_percentage: float = 100.0,
    battery_voltage: float = 4.2,
    wifi_signal_percent: float = 100.0,
) -> StatusReport:
    """Build a telemetry report as a device would publish it."""
    if now is None:
        now = time.time()
    return StatusReport(
        battery_percentage=battery_percentage,
        battery_voltage=battery_voltage,
        uptime_seconds=max(0.0, now - started_at),
        wifi_signal_percent=wifi_signal_percent,
        observed_at_epoch_seconds=now,
    )


def status_message(root: str, device: str, report: StatusReport) -> OutboundMessage:
    """Telemetry is not retained, so a silent device ages out."""
    return OutboundMessage(topic=device_status_topic(root, device), payload=encode_status(report), retain=False)

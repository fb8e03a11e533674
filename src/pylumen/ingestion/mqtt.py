"""MQTT ingestion helpers.

This module translates raw MQTT messages into decoded, device-addressed
updates. Routing and decoding failures are routine on a shared broker and
are reported as ``None``, never raised.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass

from pylumen.codec import LightingValue, decode_lighting, decode_status
from pylumen.exceptions import LumenDecodeError
from pylumen.models.status import StatusReport
from pylumen.topics import ChannelKind, route_topic

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LightingUpdate:
    device: str
    lighting: LightingValue


@dataclass(frozen=True)
class StatusUpdate:
    device: str
    status: StatusReport


InboundUpdate = LightingUpdate | StatusUpdate


def build_update(
    topic: str,
    payload: bytes,
    *,
    root: str,
    devices: Collection[str],
) -> InboundUpdate | None:
    """Route and decode one inbound MQTT message.

    Returns ``None`` for unrecognized topics, unknown devices, malformed
    bytes and schema mismatches.
    """
    routed = route_topic(topic, payload, root=root, devices=devices)
    if routed is None:
        return None

    try:
        if routed.kind is ChannelKind.LIGHTING_STATUS:
            return LightingUpdate(device=routed.device, lighting=decode_lighting(routed.payload))
        return StatusUpdate(device=routed.device, status=decode_status(routed.payload))
    except LumenDecodeError as exc:
        _logger.debug(
            "Dropping %s payload for device=%s reason=%s: %s",
            routed.kind,
            routed.device,
            exc.reason,
            exc,
        )
        return None

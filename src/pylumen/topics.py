"""Topic naming scheme and inbound topic routing.

Every topic lives under a shared root token::

    {root}/{device}/lighting/set      UI -> device
    {root}/{device}/lighting/status   device -> UI (retained echo)
    {root}/{device}/status            device -> UI (telemetry)

A shared public broker carries plenty of unrelated traffic, so anything
that does not match is classified as unrecognized and dropped quietly.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass
from enum import StrEnum

_logger = logging.getLogger(__name__)


class ChannelKind(StrEnum):
    LIGHTING_STATUS = "lighting_status"
    DEVICE_STATUS = "device_status"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class RoutedMessage:
    """An inbound message matched to a known device and channel."""

    kind: ChannelKind
    device: str
    payload: bytes


def lighting_set_topic(root: str, device: str) -> str:
    return f"{root}/{device}/lighting/set"


def lighting_status_topic(root: str, device: str) -> str:
    return f"{root}/{device}/lighting/status"


def device_status_topic(root: str, device: str) -> str:
    return f"{root}/{device}/status"


def root_wildcard(root: str) -> str:
    """Subscription covering every topic under *root*."""
    return f"{root}/#"


def lighting_set_wildcard(root: str) -> str:
    """Subscription covering every device's ``lighting/set`` topic."""
    return f"{root}/+/lighting/set"


def classify_topic(topic: str, *, root: str, devices: Collection[str]) -> tuple[ChannelKind, str | None]:
    """Classify *topic* and extract its device token.

    Returns ``(ChannelKind.UNRECOGNIZED, None)`` for any shape outside the
    naming scheme, a foreign root, or a device outside *devices*.
    """
    parts = topic.split("/")
    if len(parts) == 4 and parts[2:] == ["lighting", "status"]:
        kind = ChannelKind.LIGHTING_STATUS
    elif len(parts) == 3 and parts[2] == "status":
        kind = ChannelKind.DEVICE_STATUS
    else:
        return ChannelKind.UNRECOGNIZED, None

    if parts[0] != root or parts[1] not in devices:
        return ChannelKind.UNRECOGNIZED, None
    return kind, parts[1]


def parse_lighting_set_topic(topic: str, *, root: str) -> str | None:
    """Return the device token of a ``{root}/{device}/lighting/set`` topic."""
    parts = topic.split("/")
    if len(parts) != 4 or parts[0] != root or parts[2:] != ["lighting", "set"] or not parts[1]:
        return None
    return parts[1]


def route_topic(
    topic: str,
    payload: bytes,
    *,
    root: str,
    devices: Collection[str],
) -> RoutedMessage | None:
    """Route an inbound message, or return ``None`` when it is noise."""
    kind, device = classify_topic(topic, root=root, devices=devices)
    if kind is ChannelKind.UNRECOGNIZED or device is None:
        _logger.debug("Ignoring message on unrecognized topic=%s", topic)
        return None
    return RoutedMessage(kind=kind, device=device, payload=payload)

"""Per-device record held by the state store."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from pylumen.models.lighting import LightingState
from pylumen.models.status import StatusReport


class DeviceRecord(BaseModel):
    """Current known state of one device.

    ``lighting`` is always populated. ``status`` stays ``None`` until the
    first valid telemetry report. ``selected`` is local UI state and is
    never published.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    identity: str
    lighting: LightingState
    status: StatusReport | None = None
    selected: bool = False

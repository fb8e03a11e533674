"""Change notifications emitted by the device state store."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from pylumen.state.record import DeviceRecord


class StoreField(StrEnum):
    LIGHTING = "lighting"
    STATUS = "status"
    SELECTED = "selected"


class StateChange(BaseModel):
    """One mutation of one device record."""

    model_config = ConfigDict(frozen=True)

    device: str
    field: StoreField
    record: DeviceRecord = Field(..., description="The record after the change")
    changed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

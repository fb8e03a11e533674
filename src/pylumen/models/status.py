"""Device telemetry model."""

from __future__ import annotations

from pydantic import Field

from pylumen.models._base import LumenBaseModel


class StatusReport(LumenBaseModel):
    """Periodic telemetry published by a device on ``{root}/{device}/status``.

    Parameters
    ----------
    battery_percentage : float
        Remaining battery charge, 0-100.
    battery_voltage : float
        Battery voltage in volts.
    uptime_seconds : float
        Seconds since the device booted (wire key ``uptime``).
    wifi_signal_percent : float
        Wi-Fi signal quality, 0-100 (wire key ``wifiSignalStrength``).
    observed_at_epoch_seconds : float
        Epoch seconds at which the device sampled the report
        (wire key ``timestamp``). Liveness is derived from this.
    """

    battery_percentage: float
    battery_voltage: float
    uptime_seconds: float = Field(alias="uptime")
    wifi_signal_percent: float = Field(alias="wifiSignalStrength")
    observed_at_epoch_seconds: float = Field(alias="timestamp")

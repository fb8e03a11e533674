"""In-memory device state store.

The store is created once per session with one record per known device
and never grows or shrinks. Records are immutable; every mutation swaps
in a new record and notifies listeners.

All methods must be called from the session's event loop thread.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from pylumen.exceptions import LumenUnknownDeviceError
from pylumen.models.lighting import (
    ColourLighting,
    LightingMode,
    RainbowLighting,
    StrobeLighting,
    default_lighting,
)
from pylumen.models.status import StatusReport
from pylumen.state.events import StateChange, StoreField
from pylumen.state.record import DeviceRecord

_logger = logging.getLogger(__name__)

LightingValue = ColourLighting | RainbowLighting | StrobeLighting
StateListener = Callable[[StateChange], None]


class DeviceStateStore:
    """Canonical mapping from device name to :class:`DeviceRecord`."""

    def __init__(
        self,
        devices: Iterable[str],
        *,
        initial_lighting: LightingValue | None = None,
    ) -> None:
        lighting = initial_lighting or default_lighting(LightingMode.COLOUR)
        self._devices: tuple[str, ...] = tuple(devices)
        self._records: dict[str, DeviceRecord] = {
            name: DeviceRecord(identity=name, lighting=lighting) for name in self._devices
        }
        # Last value seen per mode, so switching back restores it.
        self._lighting_by_mode: dict[str, dict[LightingMode, LightingValue]] = {
            name: {LightingMode(lighting.mode): lighting} for name in self._devices
        }
        self._listeners: list[StateListener] = []

    @property
    def devices(self) -> tuple[str, ...]:
        return self._devices

    def __contains__(self, device: object) -> bool:
        return device in self._records

    def __getitem__(self, device: str) -> DeviceRecord:
        return self._record(device)

    def __len__(self) -> int:
        return len(self._records)

    def _record(self, device: str) -> DeviceRecord:
        record = self._records.get(device)
        if record is None:
            raise LumenUnknownDeviceError(device)
        return record

    def snapshot(self) -> dict[str, DeviceRecord]:
        """Return a shallow copy of every record, keyed by device."""
        return dict(self._records)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener* and return a callable that removes it."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def clear_listeners(self) -> None:
        self._listeners.clear()

    def _replace(self, device: str, field: StoreField, record: DeviceRecord) -> DeviceRecord:
        self._records[device] = record
        change = StateChange(device=device, field=field, record=record)
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                _logger.warning("State listener failed for device=%s field=%s", device, field, exc_info=True)
        return record

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_lighting(self, device: str, lighting: LightingValue) -> DeviceRecord:
        """Replace the device's lighting; variants are never merged."""
        current = self._record(device)
        self._lighting_by_mode[device][LightingMode(lighting.mode)] = lighting
        if current.lighting == lighting:
            return current
        _logger.debug("Lighting for device=%s -> %s", device, lighting)
        return self._replace(device, StoreField.LIGHTING, current.model_copy(update={"lighting": lighting}))

    def set_status(self, device: str, status: StatusReport) -> DeviceRecord:
        current = self._record(device)
        return self._replace(device, StoreField.STATUS, current.model_copy(update={"status": status}))

    def set_selected(self, device: str, selected: bool) -> DeviceRecord:
        current = self._record(device)
        if current.selected == selected:
            return current
        return self._replace(device, StoreField.SELECTED, current.model_copy(update={"selected": selected}))

    def toggle_selected(self, device: str) -> DeviceRecord:
        return self.set_selected(device, not self._record(device).selected)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def selected_devices(self) -> frozenset[str]:
        return frozenset(name for name, record in self._records.items() if record.selected)

    def lighting_for_mode(self, device: str, mode: LightingMode | str) -> LightingValue:
        """Return the lighting value to use when *device* switches to *mode*.

        The current value when already in *mode*, otherwise the last value
        the device held in *mode* this session, otherwise the mode default.
        """
        target = LightingMode(mode)
        current = self._record(device).lighting
        if current.mode == target:
            return current
        remembered = self._lighting_by_mode[device].get(target)
        if remembered is not None:
            return remembered
        return default_lighting(target)

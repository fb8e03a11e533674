"""Data models for pylumen wire payloads."""

from pylumen.models._base import LumenBaseModel
from pylumen.models.lighting import (
    DEFAULT_LIGHTING_BY_MODE,
    LIGHTING_ADAPTER,
    ColourLighting,
    LightingMode,
    LightingState,
    RainbowLighting,
    StrobeLighting,
    default_lighting,
)
from pylumen.models.status import StatusReport

__all__ = [
    "ColourLighting",
    "DEFAULT_LIGHTING_BY_MODE",
    "LIGHTING_ADAPTER",
    "LightingMode",
    "LightingState",
    "LumenBaseModel",
    "RainbowLighting",
    "StatusReport",
    "StrobeLighting",
    "default_lighting",
]

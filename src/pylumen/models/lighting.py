"""Lighting payload models.

A device is always in exactly one lighting mode. The ``mode`` field is
the discriminant: pydantic checks it before looking at any
variant-specific field, so an unknown mode fails fast.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import Field, TypeAdapter

from pylumen.models._base import LumenBaseModel


class LightingMode(StrEnum):
    COLOUR = "colour"
    RAINBOW = "rainbow"
    STROBE = "strobe"


class ColourLighting(LumenBaseModel):
    """Solid colour, ``colour`` is a ``#rrggbb`` string."""

    mode: Literal["colour"] = "colour"
    colour: str


class RainbowLighting(LumenBaseModel):
    """Colour cycle at ``speed``."""

    mode: Literal["rainbow"] = "rainbow"
    speed: float


class StrobeLighting(LumenBaseModel):
    """Flashing ``colour`` at ``speed``."""

    mode: Literal["strobe"] = "strobe"
    colour: str
    speed: float


LightingState = Annotated[
    ColourLighting | RainbowLighting | StrobeLighting,
    Field(discriminator="mode"),
]
"""Tagged union of every lighting variant."""

LIGHTING_ADAPTER: TypeAdapter[ColourLighting | RainbowLighting | StrobeLighting] = TypeAdapter(LightingState)

DEFAULT_LIGHTING_BY_MODE: dict[LightingMode, ColourLighting | RainbowLighting | StrobeLighting] = {
    LightingMode.COLOUR: ColourLighting(colour="#ffff00"),
    LightingMode.RAINBOW: RainbowLighting(speed=5),
    LightingMode.STROBE: StrobeLighting(colour="#ffffff", speed=10),
}


def default_lighting(mode: LightingMode | str = LightingMode.COLOUR) -> ColourLighting | RainbowLighting | StrobeLighting:
    """Return the default lighting value for *mode*."""
    return DEFAULT_LIGHTING_BY_MODE[LightingMode(mode)]

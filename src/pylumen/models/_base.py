"""Base model for pylumen wire payloads.

Every payload model inherits from :class:`LumenBaseModel` which provides:

* ``alias_generator=to_camel`` so the camelCase wire keys map
  automatically to snake_case fields.
* ``strict=True`` so nothing is coerced: a numeric string is not a
  number and a boolean is not a speed.
* ``allow_inf_nan=False`` so NaN and infinities never reach the store.
* ``frozen=True`` so a decoded payload is immutable once received.
* ``extra="ignore"`` so unknown keys sent by newer firmware are tolerated.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class LumenBaseModel(BaseModel):
    """Base for pylumen wire payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        strict=True,
        allow_inf_nan=False,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> dict[str, Any]:
        """Return the payload as a dict keyed by wire field names."""
        return self.model_dump(mode="json", by_alias=True)

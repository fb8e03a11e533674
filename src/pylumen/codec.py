"""Payload codec: raw MQTT bytes to typed payload models and back.

Decoding happens in two steps so the two failure kinds stay distinct:
bytes that are not JSON are :attr:`DecodeFailure.MALFORMED`; JSON that
does not match a known shape is :attr:`DecodeFailure.SCHEMA_MISMATCH`.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from pylumen.exceptions import DecodeFailure, LumenDecodeError
from pylumen.models.lighting import LIGHTING_ADAPTER, ColourLighting, RainbowLighting, StrobeLighting
from pylumen.models.status import StatusReport

LightingValue = ColourLighting | RainbowLighting | StrobeLighting


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a JSON value")


def _load_json(raw: bytes | bytearray | str) -> Any:
    try:
        text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
        return json.loads(text, parse_constant=_reject_constant)
    except (UnicodeDecodeError, ValueError, RecursionError) as exc:
        raise LumenDecodeError(f"Payload is not valid JSON: {exc}", reason=DecodeFailure.MALFORMED) from exc


def decode_lighting(raw: bytes | bytearray | str) -> LightingValue:
    """Decode a ``lighting/set`` or ``lighting/status`` payload.

    Raises :class:`LumenDecodeError` when the payload is not JSON or does
    not match any lighting variant.
    """
    data = _load_json(raw)
    try:
        return LIGHTING_ADAPTER.validate_python(data, by_alias=True, by_name=False)
    except ValidationError as exc:
        raise LumenDecodeError(
            f"Payload is not a lighting state: {exc.error_count()} error(s)",
            reason=DecodeFailure.SCHEMA_MISMATCH,
        ) from exc


def decode_status(raw: bytes | bytearray | str) -> StatusReport:
    """Decode a device ``status`` telemetry payload."""
    data = _load_json(raw)
    if not isinstance(data, dict):
        raise LumenDecodeError("Status payload is not a JSON object", reason=DecodeFailure.SCHEMA_MISMATCH)
    try:
        return StatusReport.model_validate(data, by_alias=True, by_name=False)
    except ValidationError as exc:
        raise LumenDecodeError(
            f"Payload is not a status report: {exc.error_count()} error(s)",
            reason=DecodeFailure.SCHEMA_MISMATCH,
        ) from exc


def encode_lighting(state: LightingValue) -> bytes:
    """Serialise a lighting state with its wire field names."""
    return json.dumps(state.to_wire(), separators=(",", ":"), allow_nan=False).encode("utf-8")


def encode_status(report: StatusReport) -> bytes:
    """Serialise a status report with its wire field names."""
    return json.dumps(report.to_wire(), separators=(",", ":"), allow_nan=False).encode("utf-8")

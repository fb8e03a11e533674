"""Custom exception hierarchy for pylumen."""

from __future__ import annotations

from enum import StrEnum


class LumenError(Exception):
    """Base exception for all pylumen errors."""


class LumenConfigError(LumenError):
    """Invalid or missing configuration."""


class DecodeFailure(StrEnum):
    """Why an inbound payload could not be decoded."""

    MALFORMED = "malformed"
    SCHEMA_MISMATCH = "schema_mismatch"


class LumenDecodeError(LumenError):
    """Payload bytes could not be turned into a known payload variant.

    ``reason`` is :attr:`DecodeFailure.MALFORMED` when the bytes are not
    JSON at all, and :attr:`DecodeFailure.SCHEMA_MISMATCH` when the JSON
    does not match any known shape.
    """

    def __init__(self, message: str, *, reason: DecodeFailure) -> None:
        self.reason = reason
        super().__init__(message)


class LumenNotConnectedError(LumenError):
    """Client used outside of its ``async with`` block."""


class LumenUnknownDeviceError(LumenError, KeyError):
    """A device name outside the configured device set was used."""

    def __init__(self, device: str) -> None:
        self.device = device
        super().__init__(f"Unknown device: {device!r}")

    def __str__(self) -> str:
        return self.args[0]

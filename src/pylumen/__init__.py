"""pylumen - Async MQTT sync layer for a small fleet of wireless lights."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pylumen")
except PackageNotFoundError:
    __version__ = "0+local"
from pylumen._mqtt import ConnectionManager, ConnectionState
from pylumen.client import LumenClient
from pylumen.codec import decode_lighting, decode_status, encode_lighting, encode_status
from pylumen.config import LumenConfig
from pylumen.exceptions import (
    DecodeFailure,
    LumenConfigError,
    LumenDecodeError,
    LumenError,
    LumenNotConnectedError,
    LumenUnknownDeviceError,
)
from pylumen.models import (
    ColourLighting,
    LightingMode,
    LightingState,
    RainbowLighting,
    StatusReport,
    StrobeLighting,
    default_lighting,
)
from pylumen.state.events import StateChange, StoreField
from pylumen.state.liveness import is_online, visible_status
from pylumen.state.record import DeviceRecord
from pylumen.state.store import DeviceStateStore
from pylumen.topics import ChannelKind, RoutedMessage, classify_topic, route_topic

__all__ = [
    "__version__",
    "ChannelKind",
    "ColourLighting",
    "ConnectionManager",
    "ConnectionState",
    "DecodeFailure",
    "DeviceRecord",
    "DeviceStateStore",
    "LightingMode",
    "LightingState",
    "LumenClient",
    "LumenConfig",
    "LumenConfigError",
    "LumenDecodeError",
    "LumenError",
    "LumenNotConnectedError",
    "LumenUnknownDeviceError",
    "RainbowLighting",
    "RoutedMessage",
    "StateChange",
    "StatusReport",
    "StoreField",
    "StrobeLighting",
    "classify_topic",
    "decode_lighting",
    "decode_status",
    "default_lighting",
    "encode_lighting",
    "encode_status",
    "is_online",
    "route_topic",
    "visible_status",
]

"""Stream framing and multi-part reassembly for NMEA positioning receivers."""

from __future__ import annotations

from importlib import metadata

from .config import DeviceConfig, build_transport, create_device
from .device import (
    DeviceState,
    EventSink,
    MessageReceived,
    MultiPartFacet,
    NmeaDevice,
    NmeaMessage,
    ParseFailure,
    TransportError,
    parse_line,
)

try:
    __version__ = metadata.version("nmea-device")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev
    __version__ = "0.0.0"


__all__ = [
    "__version__",
    "DeviceConfig",
    "DeviceState",
    "EventSink",
    "MessageReceived",
    "MultiPartFacet",
    "NmeaDevice",
    "NmeaMessage",
    "ParseFailure",
    "TransportError",
    "build_transport",
    "create_device",
    "parse_line",
]

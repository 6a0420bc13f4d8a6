"""NMEA device core: framing, reassembly, events, transports and lifecycle."""

from .constants import (
    DEFAULT_BAUD_RATE,
    DEFAULT_MAX_BUFFER_CHARS,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_READ_CHUNK_SIZE,
    DEFAULT_READ_TIMEOUT,
    DEFAULT_TCP_PORT,
)
from .errors import (
    DeviceOpenError,
    DeviceStateError,
    NmeaChecksumError,
    NmeaDeviceError,
    NmeaParseError,
    TransportReadError,
)
from .events import EventSink, MessageReceived, ParseFailure, TransportError
from .framing import LineFramer
from .lifecycle import DeviceState, NmeaDevice
from .parsers import MultiPartFacet, NmeaMessage, parse_line
from .reassembly import FragmentPending, GroupComplete, MultiPartReassembler, Standalone
from .transports import (
    BaseStreamTransport,
    FileStreamTransport,
    SerialStreamTransport,
    TcpStreamTransport,
)

__all__ = [
    # Constants
    "DEFAULT_BAUD_RATE",
    "DEFAULT_MAX_BUFFER_CHARS",
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_READ_CHUNK_SIZE",
    "DEFAULT_READ_TIMEOUT",
    "DEFAULT_TCP_PORT",
    # Errors
    "DeviceOpenError",
    "DeviceStateError",
    "NmeaChecksumError",
    "NmeaDeviceError",
    "NmeaParseError",
    "TransportReadError",
    # Events
    "EventSink",
    "MessageReceived",
    "ParseFailure",
    "TransportError",
    # Framing / parsing / reassembly
    "LineFramer",
    "MultiPartFacet",
    "NmeaMessage",
    "parse_line",
    "FragmentPending",
    "GroupComplete",
    "MultiPartReassembler",
    "Standalone",
    # Transports
    "BaseStreamTransport",
    "FileStreamTransport",
    "SerialStreamTransport",
    "TcpStreamTransport",
    # Lifecycle
    "DeviceState",
    "NmeaDevice",
]

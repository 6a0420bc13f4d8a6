"""Byte-stream transports for NMEA devices."""

from .base_transport import BaseStreamTransport
from .stream_transport import StreamPair, StreamPairTransport
from .serial_transport import SerialStreamTransport
from .tcp_transport import TcpStreamTransport
from .file_transport import FileStreamTransport

__all__ = [
    "BaseStreamTransport",
    "FileStreamTransport",
    "SerialStreamTransport",
    "StreamPair",
    "StreamPairTransport",
    "TcpStreamTransport",
]

"""Exception types raised by the device, parser and transports."""

from __future__ import annotations


class NmeaDeviceError(Exception):
    """Base class for nmea_device errors."""


class DeviceStateError(NmeaDeviceError):
    """Operation not allowed in the device's current lifecycle state."""


class DeviceOpenError(NmeaDeviceError):
    """The transport stream could not be opened."""


class TransportReadError(NmeaDeviceError):
    """A read from the transport stream failed.

    Delivered to listeners through a ``TransportError`` event; the read loop
    keeps running.
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class NmeaParseError(NmeaDeviceError, ValueError):
    """A framed line is not a well-formed NMEA sentence."""


class NmeaChecksumError(NmeaParseError):
    """The sentence checksum does not match its payload."""

    def __init__(self, sentence: str, expected: int, actual: int):
        super().__init__(
            f"Checksum mismatch (expected {expected:02X}, got {actual:02X}): {sentence}"
        )
        self.sentence = sentence
        self.expected = expected
        self.actual = actual


__all__ = [
    "NmeaDeviceError",
    "DeviceStateError",
    "DeviceOpenError",
    "TransportReadError",
    "NmeaParseError",
    "NmeaChecksumError",
]

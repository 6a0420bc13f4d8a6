"""NMEA parsing components."""

from .nmea_types import MessageLike, MultiPartFacet, NmeaMessage
from .nmea_parser import compute_checksum, parse_line, validate_checksum

__all__ = [
    "MessageLike",
    "MultiPartFacet",
    "NmeaMessage",
    "compute_checksum",
    "parse_line",
    "validate_checksum",
]

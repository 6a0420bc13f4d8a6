"""NMEA 0183 line parser.

Turns one framed line into an ``NmeaMessage``. Only the envelope is
interpreted: start character, header, comma separated fields and the XOR
checksum. GSV and RTE sentences additionally get a ``MultiPartFacet`` built
from their first two fields (total sentences, sentence number).
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..constants import CHECKSUM_DELIMITER, MULTIPART_SENTENCE_IDS, SENTENCE_START_CHARS
from ..errors import NmeaChecksumError, NmeaParseError
from .nmea_types import MultiPartFacet, NmeaMessage


def compute_checksum(payload: str) -> int:
    """XOR of every character between the start character and ``*``."""
    calculated = 0
    for char in payload:
        calculated ^= ord(char)
    return calculated


def validate_checksum(sentence: str) -> bool:
    """Return True if ``sentence`` carries a checksum that matches its payload."""
    if not sentence.startswith(SENTENCE_START_CHARS) or CHECKSUM_DELIMITER not in sentence:
        return False
    try:
        payload, checksum_str = sentence[1:].split(CHECKSUM_DELIMITER, 1)
        return compute_checksum(payload) == int(checksum_str[:2], 16)
    except (ValueError, IndexError):
        return False


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except ValueError:
        return None


def _multipart_facet(sentence_id: str, fields: tuple[str, ...], line: str) -> Optional[MultiPartFacet]:
    if sentence_id not in MULTIPART_SENTENCE_IDS:
        return None
    if len(fields) < 2:
        raise NmeaParseError(f"{sentence_id} sentence missing part counters: {line}")
    total = _parse_int(fields[0])
    number = _parse_int(fields[1])
    if total is None or number is None:
        raise NmeaParseError(f"{sentence_id} sentence has non-numeric part counters: {line}")
    return MultiPartFacet(sequence_number=number, total_parts=total)


def parse_line(line: str) -> NmeaMessage:
    """Parse a trimmed NMEA line.

    Raises:
        NmeaParseError: The line is not an NMEA sentence.
        NmeaChecksumError: The checksum is present and wrong.
    """
    if not line or not line.startswith(SENTENCE_START_CHARS):
        raise NmeaParseError(f"Not an NMEA sentence: {line!r}")

    body = line[1:]
    checksum: Optional[int] = None
    if CHECKSUM_DELIMITER in body:
        body, checksum_str = body.split(CHECKSUM_DELIMITER, 1)
        checksum_str = checksum_str.strip()
        if checksum_str:
            try:
                checksum = int(checksum_str[:2], 16)
            except ValueError:
                raise NmeaParseError(f"Malformed checksum in: {line}") from None
            actual = compute_checksum(body)
            if actual != checksum:
                raise NmeaChecksumError(line, checksum, actual)

    parts = body.split(",")
    header = parts[0].strip().upper()
    if not header:
        raise NmeaParseError(f"Missing sentence header: {line}")
    fields = tuple(parts[1:])

    message = NmeaMessage(message_type=header, fields=fields, checksum=checksum, raw=line)
    facet = _multipart_facet(message.sentence_id, fields, line)
    if facet is None:
        return message
    return replace(message, multipart=facet)


__all__ = ["compute_checksum", "validate_checksum", "parse_line"]

"""NMEA message value types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class MultiPartFacet:
    """Position of a sentence within a multi-sentence cycle."""

    sequence_number: int
    total_parts: int

    @property
    def is_valid(self) -> bool:
        return 1 <= self.sequence_number <= self.total_parts

    @property
    def is_first(self) -> bool:
        return self.sequence_number == 1

    @property
    def is_last(self) -> bool:
        return self.sequence_number == self.total_parts


@dataclass(frozen=True, slots=True)
class NmeaMessage:
    """One parsed NMEA sentence.

    ``message_type`` is the full sentence header (``GPGSV``, ``AIVDM``), which
    is also the key multi-part cycles are grouped by.
    """

    message_type: str
    fields: tuple[str, ...] = ()
    checksum: Optional[int] = None
    raw: str = ""
    multipart: Optional[MultiPartFacet] = None

    @property
    def talker_id(self) -> str:
        """Two-letter talker prefix (``GP``, ``GN``), empty for proprietary sentences."""
        if self.message_type.startswith("P") or len(self.message_type) < 5:
            return ""
        return self.message_type[:2]

    @property
    def sentence_id(self) -> str:
        """Sentence formatter (``GSV`` from ``GPGSV``)."""
        if self.message_type.startswith("P") or len(self.message_type) < 5:
            return self.message_type
        return self.message_type[2:]

    @property
    def is_multipart(self) -> bool:
        return self.multipart is not None


@runtime_checkable
class MessageLike(Protocol):
    """What the reassembler needs from a message, parsed by any parser."""

    message_type: str
    multipart: Optional[MultiPartFacet]


__all__ = ["MultiPartFacet", "NmeaMessage", "MessageLike"]

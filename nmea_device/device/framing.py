"""Newline framing for raw NMEA byte streams.

Transports deliver bytes in whatever chunks the OS hands them: half a
sentence, three and a half sentences, a multi-byte character split down the
middle. ``LineFramer`` accumulates those chunks and hands back every complete
line currently in the buffer, trimmed, with empty lines dropped.
"""

from __future__ import annotations

import codecs
import threading
from typing import Optional

from nmea_device.core.logging_utils import get_module_logger
from .constants import DEFAULT_MAX_BUFFER_CHARS, LINE_TERMINATOR

logger = get_module_logger("LineFramer")


class LineFramer:
    """Accumulate bytes and extract newline-terminated text lines.

    The buffer is guarded by a lock: the read loop feeds it while
    ``close()``/``dispose()`` may clear it from another caller.

    Example:
        framer = LineFramer()
        framer.feed(b"$GPGGA,1*7\\r\\n$GPR")   # -> ["$GPGGA,1*7"]
        framer.feed(b"MC,2*0\\n")              # -> ["$GPRMC,2*0"]
    """

    def __init__(self, max_buffer_chars: Optional[int] = DEFAULT_MAX_BUFFER_CHARS):
        """Initialize the framer.

        Args:
            max_buffer_chars: Upper bound for an unterminated tail. When a
                stream produces more than this without a newline the tail is
                discarded. ``None`` disables the bound.
        """
        self._lock = threading.Lock()
        self._buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._max_buffer_chars = max_buffer_chars
        self._discarded_chars = 0

    @property
    def pending(self) -> str:
        """Unterminated text waiting for its newline."""
        with self._lock:
            return self._buffer

    @property
    def max_buffer_chars(self) -> Optional[int]:
        return self._max_buffer_chars

    @property
    def discarded_chars(self) -> int:
        """Total characters dropped because the buffer bound was exceeded."""
        return self._discarded_chars

    def feed(self, data: bytes) -> list[str]:
        """Append ``data`` and return every complete line now in the buffer.

        Lines are returned in stream order with surrounding whitespace
        (including the ``\\r`` of ``\\r\\n``) removed. Empty lines are skipped.
        """
        lines: list[str] = []
        with self._lock:
            self._buffer += self._decoder.decode(data)

            while True:
                line_end = self._buffer.find(LINE_TERMINATOR)
                if line_end < 0:
                    break
                line = self._buffer[:line_end].strip()
                self._buffer = self._buffer[line_end + 1:]
                if line:
                    lines.append(line)

            if self._max_buffer_chars is not None and len(self._buffer) > self._max_buffer_chars:
                dropped = len(self._buffer)
                self._discarded_chars += dropped
                self._buffer = ""
                logger.warning(
                    "Discarded %d buffered characters with no line terminator", dropped
                )

        return lines

    def clear(self) -> None:
        """Drop buffered text and any partially decoded character."""
        with self._lock:
            self._buffer = ""
            self._decoder.reset()


__all__ = ["LineFramer"]

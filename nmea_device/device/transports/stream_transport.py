"""Shared implementation for transports backed by asyncio stream pairs."""

from __future__ import annotations

import asyncio
import contextlib
from abc import abstractmethod
from dataclasses import dataclass
from typing import Optional

from nmea_device.core.logging_utils import get_module_logger
from .base_transport import BaseStreamTransport

logger = get_module_logger("StreamTransport")


@dataclass(slots=True)
class StreamPair:
    """Reader/writer pair handed out as the transport's stream object."""

    reader: asyncio.StreamReader
    writer: asyncio.StreamWriter


class StreamPairTransport(BaseStreamTransport):
    """Base for transports that open an ``(asyncio.StreamReader, StreamWriter)`` pair.

    Subclasses implement ``_open_connection``; reads, timeouts, EOF and
    closing are handled here.
    """

    def __init__(self) -> None:
        self._eof_reported = False
        self._last_error: Optional[str] = None

    @property
    def last_error(self) -> Optional[str]:
        """Last open/read error message, if any."""
        return self._last_error

    @abstractmethod
    async def _open_connection(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        ...

    async def open_stream(self) -> StreamPair:
        try:
            reader, writer = await self._open_connection()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._last_error = str(exc)
            logger.warning("Failed to open %s: %s", self.describe(), exc)
            raise
        self._eof_reported = False
        self._last_error = None
        logger.info("Opened %s", self.describe())
        return StreamPair(reader, writer)

    async def read(self, stream: StreamPair, max_bytes: int, timeout: float) -> bytes:
        try:
            data = await asyncio.wait_for(stream.reader.read(max_bytes), timeout=timeout)
        except asyncio.TimeoutError:
            return b""
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._last_error = str(exc)
            raise

        if not data and stream.reader.at_eof():
            if not self._eof_reported:
                self._eof_reported = True
                self._last_error = "Stream ended (EOF)"
                logger.warning("%s stream ended (EOF)", self.describe())
            # Keep the loop from spinning on a dead stream
            await asyncio.sleep(timeout)
        return data

    async def close_stream(self, stream: StreamPair) -> None:
        writer = stream.writer
        with contextlib.suppress(Exception):
            writer.close()

        try:
            await asyncio.wait_for(writer.wait_closed(), timeout=1.0)
        except asyncio.TimeoutError:
            logger.debug("Timeout waiting for %s to close", self.describe())
        except Exception as exc:
            logger.debug("Error closing %s: %s", self.describe(), exc)

        logger.info("Closed %s", self.describe())

    def abort_stream(self, stream: StreamPair, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        # asyncio transports are not thread-safe; abort on the loop that owns them
        if loop is not None and not loop.is_closed() and not _running_on(loop):
            try:
                loop.call_soon_threadsafe(self._abort_pair, stream)
                return
            except RuntimeError:
                # loop closed between the check and the call
                pass
        self._abort_pair(stream)

    def _abort_pair(self, stream: StreamPair) -> None:
        transport = getattr(stream.writer, "transport", None)
        try:
            if transport is not None and hasattr(transport, "abort"):
                transport.abort()
            else:
                stream.writer.close()
        except Exception as exc:
            logger.debug("Error aborting %s: %s", self.describe(), exc)


def _running_on(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False


__all__ = ["StreamPair", "StreamPairTransport"]

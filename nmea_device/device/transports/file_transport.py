"""Replay a recorded NMEA log file as if it were a live receiver."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional, Union

import aiofiles

from nmea_device.core.logging_utils import get_module_logger
from .base_transport import BaseStreamTransport

logger = get_module_logger("FileStreamTransport")


class FileStreamTransport(BaseStreamTransport):
    """Stream the bytes of a log file.

    Args:
        path: File with raw NMEA sentences, one per line.
        loop: Rewind to the start at end of file instead of going idle.
        chunk_delay: Seconds to wait before each read, to pace playback.
    """

    def __init__(self, path: Union[str, Path], loop: bool = False, chunk_delay: float = 0.0):
        self.path = Path(path)
        self.loop = loop
        self.chunk_delay = chunk_delay
        self._eof_reported = False

    def describe(self) -> str:
        return f"file {self.path}"

    async def open_stream(self) -> Any:
        stream = await aiofiles.open(self.path, "rb")
        self._eof_reported = False
        logger.info("Replaying %s%s", self.path, " (looping)" if self.loop else "")
        return stream

    async def read(self, stream: Any, max_bytes: int, timeout: float) -> bytes:
        if self.chunk_delay:
            await asyncio.sleep(self.chunk_delay)

        data = await stream.read(max_bytes)
        if data:
            return data

        if self.loop:
            await stream.seek(0)
            return await stream.read(max_bytes)

        if not self._eof_reported:
            self._eof_reported = True
            logger.info("Reached end of %s", self.path)
        # Idle like a silent receiver would
        await asyncio.sleep(timeout)
        return b""

    async def close_stream(self, stream: Any) -> None:
        await stream.close()
        logger.info("Closed %s", self.path)

    def abort_stream(self, stream: Any, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        # Closing the raw file releases the descriptor at once, from any thread.
        # A read still running in the executor fails and the cancelled loop ignores it.
        try:
            stream.raw.close()
        except (OSError, ValueError) as exc:
            logger.debug("Error aborting %s: %s", self.path, exc)
        logger.info("Aborted replay of %s", self.path)


__all__ = ["FileStreamTransport"]

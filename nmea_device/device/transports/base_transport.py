"""Abstract byte-stream transport consumed by ``NmeaDevice``."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Optional


class BaseStreamTransport(ABC):
    """Source of raw bytes for a device.

    A transport hands out an opaque stream object from ``open_stream`` and
    gets that same object back for every read and for closing. The device
    never touches the stream itself.
    """

    @abstractmethod
    async def open_stream(self) -> Any:
        """Acquire the underlying stream.

        Raises:
            Exception: Any error opening the port/socket/file; the device
                wraps it in ``DeviceOpenError``.
        """

    @abstractmethod
    async def read(self, stream: Any, max_bytes: int, timeout: float) -> bytes:
        """Read up to ``max_bytes``, waiting at most ``timeout`` seconds.

        Returns ``b""`` when nothing arrived in time. Raises on read failure.
        """

    @abstractmethod
    async def close_stream(self, stream: Any) -> None:
        """Release the stream acquired by ``open_stream``."""

    def abort_stream(self, stream: Any, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Release the stream immediately, without awaiting anything.

        Used by ``NmeaDevice.dispose``, which may run on any thread. ``loop``
        is the event loop the stream was opened on; work that must happen on
        that loop is handed over with ``call_soon_threadsafe``.
        Implementations should not raise.
        """

    def describe(self) -> str:
        """Short human readable name used in log messages."""
        return type(self).__name__


__all__ = ["BaseStreamTransport"]

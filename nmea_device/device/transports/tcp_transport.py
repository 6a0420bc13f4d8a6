"""TCP transport for NMEA-over-IP sources (gpsd raw mode, marine multiplexers)."""

from __future__ import annotations

import asyncio
from typing import Optional

from ..constants import DEFAULT_TCP_PORT
from .stream_transport import StreamPairTransport


class TcpStreamTransport(StreamPairTransport):
    """Read NMEA sentences from a TCP socket."""

    def __init__(self, host: str, port: int = DEFAULT_TCP_PORT, connect_timeout: Optional[float] = 5.0):
        super().__init__()
        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout

    def describe(self) -> str:
        return f"tcp {self.host}:{self.port}"

    async def _open_connection(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        return await asyncio.wait_for(
            asyncio.open_connection(self.host, self.port),
            timeout=self.connect_timeout,
        )


__all__ = ["TcpStreamTransport"]

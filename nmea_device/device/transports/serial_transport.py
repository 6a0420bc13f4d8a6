"""Serial UART transport for NMEA receivers.

Uses serial_asyncio so reads never block the event loop. Works with UART
receivers (``/dev/serial0``) and USB-serial adapters (``/dev/ttyUSB0``,
``COM3``).
"""

from __future__ import annotations

import asyncio

import serial
import serial_asyncio

from nmea_device.core.logging_utils import get_module_logger
from ..constants import DEFAULT_BAUD_RATE
from .stream_transport import StreamPairTransport

logger = get_module_logger("SerialStreamTransport")


class SerialStreamTransport(StreamPairTransport):
    """Serial port transport.

    Example:
        transport = SerialStreamTransport("/dev/ttyUSB0", 4800)
        async with NmeaDevice(transport) as device:
            ...
    """

    def __init__(self, port: str, baudrate: int = DEFAULT_BAUD_RATE, **serial_kwargs):
        """Initialize the serial transport.

        Args:
            port: Serial port path or pyserial URL (``loop://`` works for tests)
            baudrate: Serial baudrate (4800 for NMEA 0183, 9600+ for most modules)
            **serial_kwargs: Extra ``serial.Serial`` options (bytesize, parity, ...)
        """
        super().__init__()
        self.port = port
        self.baudrate = baudrate
        self.serial_kwargs = serial_kwargs

    def describe(self) -> str:
        return f"serial {self.port} @ {self.baudrate} baud"

    async def _open_connection(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        try:
            return await serial_asyncio.open_serial_connection(
                url=self.port,
                baudrate=self.baudrate,
                **self.serial_kwargs,
            )
        except serial.SerialException as exc:
            logger.debug("serial_exception opening %s: %s", self.port, exc)
            raise


__all__ = ["SerialStreamTransport"]

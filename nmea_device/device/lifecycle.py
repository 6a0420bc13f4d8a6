"""NMEA device lifecycle and read loop.

``NmeaDevice`` owns a transport stream and one background read loop:

    transport.read -> LineFramer.feed -> parser -> MultiPartReassembler -> EventSink

State machine::

    CLOSED -> OPENING -> OPEN -> CLOSING -> CLOSED

Only the read loop touches the framer/parser/reassembler while the device is
open. ``open()``, ``close()`` and ``dispose()`` may be called from any
context; the lifecycle fields they share are guarded by ``_state_lock``.
"""

from __future__ import annotations

import asyncio
import threading
from enum import Enum
from typing import Any, Callable, Optional

from nmea_device.core.logging_utils import LoggerLike, ensure_structured_logger
from .constants import (
    DEFAULT_MAX_BUFFER_CHARS,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_READ_CHUNK_SIZE,
    DEFAULT_READ_TIMEOUT,
)
from .errors import DeviceOpenError, DeviceStateError, TransportReadError
from .events import EventSink, MessageReceived, ParseFailure, TransportError
from .framing import LineFramer
from .parsers import MessageLike, parse_line
from .reassembly import GroupComplete, MultiPartReassembler, Standalone
from .transports import BaseStreamTransport

LineParser = Callable[[str], Optional[MessageLike]]

MAX_ERROR_BACKOFF = 5.0


class DeviceState(Enum):
    CLOSED = "closed"
    OPENING = "opening"
    OPEN = "open"
    CLOSING = "closing"


class NmeaDevice:
    """A stream of NMEA sentences from one receiver.

    Example:
        device = NmeaDevice(SerialStreamTransport("/dev/ttyUSB0", 4800))
        device.events.subscribe(print, MessageReceived)
        await device.open()
        ...
        await device.close()
    """

    def __init__(
        self,
        transport: BaseStreamTransport,
        *,
        parser: LineParser = parse_line,
        device_id: Optional[str] = None,
        read_chunk_size: int = DEFAULT_READ_CHUNK_SIZE,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        error_backoff: float = 0.0,
        report_parse_failures: bool = True,
        restart_on_first_part: bool = False,
        max_buffer_chars: Optional[int] = DEFAULT_MAX_BUFFER_CHARS,
        logger: LoggerLike = None,
    ):
        """Initialize the device.

        Args:
            transport: Source of raw bytes
            parser: Turns one line into a message; may raise or return None to discard
            device_id: Name used in log messages (defaults to the transport description)
            read_chunk_size: Maximum bytes per transport read
            read_timeout: Bound on each read, and so on how long close() can wait
            poll_interval: Pause between read-loop iterations
            error_backoff: Extra delay after a failed read, doubled per consecutive
                failure up to MAX_ERROR_BACKOFF; 0 keeps the plain poll cadence
            report_parse_failures: Emit ParseFailure events for rejected lines
            restart_on_first_part: See MultiPartReassembler
            max_buffer_chars: See LineFramer
            logger: Optional logger to use instead of the package logger
        """
        if read_chunk_size < 1:
            raise ValueError("read_chunk_size must be at least 1")

        self.transport = transport
        self.device_id = device_id or transport.describe()
        self.read_chunk_size = read_chunk_size
        self.read_timeout = read_timeout
        self.poll_interval = poll_interval
        self.error_backoff = error_backoff
        self.report_parse_failures = report_parse_failures
        self.logger = ensure_structured_logger(logger, fallback_name="NmeaDevice")

        self._parser = parser
        self.events = EventSink()
        self.framer = LineFramer(max_buffer_chars)
        self.reassembler = MultiPartReassembler(restart_on_first_part)

        self._state_lock = threading.Lock()
        self._state = DeviceState.CLOSED
        self._stream: Any = None
        self._cancel_event: Optional[threading.Event] = None
        self._open_settled: Optional[asyncio.Event] = None
        self._read_task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

        self._consecutive_errors = 0
        self.parse_failures = 0

    @property
    def state(self) -> DeviceState:
        with self._state_lock:
            return self._state

    @property
    def is_open(self) -> bool:
        return self.state is DeviceState.OPEN

    # =========================================================================
    # Lifecycle Methods
    # =========================================================================

    async def open(self) -> None:
        """Open the transport stream and start the read loop.

        Raises:
            DeviceStateError: The device is not closed.
            DeviceOpenError: The transport failed to open.
        """
        with self._state_lock:
            if self._state is not DeviceState.CLOSED:
                raise DeviceStateError(
                    f"Cannot open {self.device_id}: device is {self._state.value}"
                )
            self._state = DeviceState.OPENING
            cancel = threading.Event()
            settled = asyncio.Event()
            self._cancel_event = cancel
            self._open_settled = settled
            self._loop = asyncio.get_running_loop()

        self.logger.info("Opening %s", self.device_id)
        try:
            try:
                stream = await self.transport.open_stream()
            except asyncio.CancelledError:
                self._finish_close(cancel)
                raise
            except Exception as exc:
                self._finish_close(cancel)
                raise DeviceOpenError(f"Failed to open {self.device_id}: {exc}") from exc

            with self._state_lock:
                aborted = cancel.is_set()
                if not aborted:
                    self._stream = stream
                    self.reassembler.clear()
                    self.framer.clear()
                    self._consecutive_errors = 0
                    self._state = DeviceState.OPEN
                    self._read_task = asyncio.create_task(
                        self._read_loop(stream, cancel),
                        name=f"nmea-read-{self.device_id}",
                    )

            if aborted:
                self.logger.info("Close requested while opening %s, releasing stream", self.device_id)
                await self._close_stream(stream)
                self._finish_close(cancel)
                return

            self.logger.info("Opened %s", self.device_id)
        finally:
            settled.set()

    async def close(self) -> None:
        """Stop the read loop, close the stream and clear all buffered state.

        Raises:
            DeviceStateError: The device is already closed or closing.
        """
        with self._state_lock:
            previous = self._state
            if previous in (DeviceState.CLOSED, DeviceState.CLOSING):
                raise DeviceStateError(
                    f"Cannot close {self.device_id}: device is {previous.value}"
                )
            self._state = DeviceState.CLOSING
            cancel = self._cancel_event
            settled = self._open_settled
            task = self._read_task
            stream = self._stream
            if cancel is not None:
                cancel.set()

        self.logger.info("Closing %s", self.device_id)

        if previous is DeviceState.OPENING:
            # open() sees the cancellation, releases its stream and finishes the close
            if settled is not None:
                await settled.wait()
            self.logger.info("Closed %s before it finished opening", self.device_id)
            return

        try:
            if task is not None:
                await self._await_read_loop(task)

            if stream is not None and self._owns(cancel):
                await self._close_stream(stream)
        except asyncio.CancelledError:
            # The caller gave up waiting; release the stream without awaiting
            if stream is not None and self._owns(cancel):
                self._abort_stream(stream)
            raise
        finally:
            self._finish_close(cancel)

        self.logger.info("Closed %s", self.device_id)

    def dispose(self) -> None:
        """Tear the device down without waiting for the read loop.

        Cancels the loop, aborts the stream synchronously and leaves the device
        CLOSED. Safe to call repeatedly and from any state; never raises.
        """
        with self._state_lock:
            if self._state is DeviceState.CLOSED and self._stream is None and self._read_task is None:
                return
            cancel = self._cancel_event
            task = self._read_task
            stream = self._stream
            if cancel is not None:
                cancel.set()
            self._cancel_event = None
            self._read_task = None
            self._stream = None
            self._state = DeviceState.CLOSED

        if task is not None and not task.done():
            self._cancel_task(task)

        if stream is not None:
            self._abort_stream(stream)

        # The reassembler belongs to the read loop; clear it on the loop's thread
        loop = self._loop
        if loop is None or loop.is_closed() or _running_on(loop):
            self._clear_buffers()
        else:
            try:
                loop.call_soon_threadsafe(self._clear_buffers)
            except RuntimeError:
                self._clear_buffers()
        self.logger.info("Disposed %s", self.device_id)

    async def __aenter__(self) -> "NmeaDevice":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.state in (DeviceState.OPENING, DeviceState.OPEN):
            await self.close()
        return False

    # =========================================================================
    # Read Loop
    # =========================================================================

    async def _read_loop(self, stream: Any, cancel: threading.Event) -> None:
        """Read, frame and dispatch until cancellation is requested."""
        self.logger.debug("Read loop started for %s", self.device_id)

        while not cancel.is_set():
            delay = self.poll_interval
            try:
                data = await self.transport.read(stream, self.read_chunk_size, self.read_timeout)
                self._consecutive_errors = 0
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                data = b""
                if not cancel.is_set():
                    self._consecutive_errors += 1
                    self._report_transport_error(exc)
                    if self.error_backoff > 0:
                        delay += min(
                            self.error_backoff * (2 ** (self._consecutive_errors - 1)),
                            MAX_ERROR_BACKOFF,
                        )

            if cancel.is_set():
                break

            if data:
                self._on_data(data)

            await asyncio.sleep(delay)

        self.logger.debug(
            "Read loop ended for %s (pending groups=%d, parse failures=%d)",
            self.device_id,
            len(self.reassembler),
            self.parse_failures,
        )

    def _on_data(self, data: bytes) -> None:
        for line in self.framer.feed(data):
            self._dispatch_line(line)

    def _dispatch_line(self, line: str) -> None:
        try:
            message = self._parser(line)
        except Exception as exc:
            self.parse_failures += 1
            self.logger.debug("Discarded unparsable line %r: %s", line, exc)
            if self.report_parse_failures:
                self.events.emit(ParseFailure(line, exc))
            return

        if message is None:
            return

        result = self.reassembler.ingest(message)
        self.events.emit(
            MessageReceived(
                message=message,
                is_multipart=not isinstance(result, Standalone),
                message_parts=result.parts if isinstance(result, GroupComplete) else None,
            )
        )

    def _report_transport_error(self, exc: Exception) -> None:
        error = exc if isinstance(exc, TransportReadError) else TransportReadError(
            f"Read from {self.device_id} failed: {exc}", exc
        )
        self.logger.warning(
            "Read error on %s (%d consecutive): %s", self.device_id, self._consecutive_errors, exc
        )
        self.events.emit(TransportError(error))

    # =========================================================================
    # Utility Methods
    # =========================================================================

    async def _await_read_loop(self, task: asyncio.Task) -> None:
        try:
            # shield: cancelling close() must not look like dispose() cancelling the loop
            await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.cancelled():
                # close() itself was cancelled
                task.cancel()
                raise
            # dispose() cancelled the loop underneath us
        except Exception:
            self.logger.exception("Read loop for %s ended with an error", self.device_id)

    async def _close_stream(self, stream: Any) -> None:
        try:
            await self.transport.close_stream(stream)
        except Exception as exc:
            self.logger.warning("Error closing stream for %s: %s", self.device_id, exc)

    def _abort_stream(self, stream: Any) -> None:
        try:
            self.transport.abort_stream(stream, self._loop)
        except Exception as exc:
            self.logger.warning("Error aborting stream for %s: %s", self.device_id, exc)

    def _owns(self, cancel: Optional[threading.Event]) -> bool:
        with self._state_lock:
            return self._cancel_event is cancel

    def _finish_close(self, cancel: Optional[threading.Event]) -> None:
        with self._state_lock:
            # dispose() or a newer open() may already own the lifecycle fields
            if self._cancel_event is not cancel:
                return
            self._cancel_event = None
            self._read_task = None
            self._stream = None
            self._state = DeviceState.CLOSED
        self._clear_buffers()

    def _clear_buffers(self) -> None:
        self.reassembler.clear()
        self.framer.clear()

    @staticmethod
    def _cancel_task(task: asyncio.Task) -> None:
        loop = task.get_loop()
        if _running_on(loop):
            task.cancel()
        elif not loop.is_closed():
            try:
                loop.call_soon_threadsafe(task.cancel)
            except RuntimeError:
                # loop closed concurrently; the task can no longer run
                pass


def _running_on(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False

__all__ = ["DeviceState", "LineParser", "NmeaDevice"]

"""Device events and the synchronous sink that fans them out to listeners."""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, Type, Union

from nmea_device.core.logging_utils import get_module_logger
from .constants import DEFAULT_EVENT_QUEUE_SIZE
from .parsers.nmea_types import MessageLike

logger = get_module_logger("EventSink")


@dataclass(frozen=True, slots=True)
class MessageReceived:
    """A line parsed into a message.

    ``message_parts`` is set only on the dispatch that completed a multi-part
    cycle, and then holds the whole cycle in sequence order.
    """

    message: MessageLike
    is_multipart: bool = False
    message_parts: Optional[Tuple[MessageLike, ...]] = None


@dataclass(frozen=True, slots=True)
class TransportError:
    """A transport read failed. The read loop keeps going."""

    error: BaseException


@dataclass(frozen=True, slots=True)
class ParseFailure:
    """A framed line was rejected by the parser."""

    line: str
    error: BaseException


DeviceEvent = Union[MessageReceived, TransportError, ParseFailure]
EventListener = Callable[[DeviceEvent], None]


@dataclass(slots=True)
class _Subscription:
    listener: EventListener
    event_types: Tuple[Type, ...]

    def accepts(self, event: DeviceEvent) -> bool:
        return not self.event_types or isinstance(event, self.event_types)


class EventSink:
    """Deliver device events to subscribed listeners.

    Delivery is synchronous and happens inside the read loop, in emit order.
    Listeners must return quickly; a listener that raises is logged and the
    remaining listeners still get the event.
    """

    def __init__(self) -> None:
        self._subs: Dict[int, _Subscription] = {}
        self._lock = threading.Lock()
        self._next_token = 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._subs)

    def subscribe(self, listener: EventListener, *event_types: Type) -> Callable[[], None]:
        """Register ``listener`` for ``event_types`` (all events if none given).

        Returns:
            Callable that removes the subscription; calling it again is a no-op.
        """
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subs[token] = _Subscription(listener, tuple(event_types))

        def unsubscribe() -> None:
            with self._lock:
                self._subs.pop(token, None)

        return unsubscribe

    def emit(self, event: DeviceEvent) -> None:
        with self._lock:
            subscriptions = list(self._subs.values())
        for sub in subscriptions:
            if not sub.accepts(event):
                continue
            try:
                sub.listener(event)
            except Exception:
                logger.exception("Listener %r failed handling %s", sub.listener, type(event).__name__)

    def queue(self, *event_types: Type, maxsize: int = DEFAULT_EVENT_QUEUE_SIZE) -> "asyncio.Queue[DeviceEvent]":
        """Return an ``asyncio.Queue`` fed with events from this sink.

        When the queue is full the oldest event is dropped to make room, so a
        slow consumer never stalls the read loop. Must be called from the
        event loop the device runs on.
        """
        events: asyncio.Queue[DeviceEvent] = asyncio.Queue(maxsize=maxsize)

        def _enqueue(event: DeviceEvent) -> None:
            try:
                events.put_nowait(event)
            except asyncio.QueueFull:
                try:
                    dropped = events.get_nowait()
                    logger.warning("Event queue full, dropped %s", type(dropped).__name__)
                    events.put_nowait(event)
                except asyncio.QueueEmpty:
                    pass

        self.subscribe(_enqueue, *event_types)
        return events


__all__ = [
    "DeviceEvent",
    "EventListener",
    "EventSink",
    "MessageReceived",
    "ParseFailure",
    "TransportError",
]

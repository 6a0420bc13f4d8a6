"""Multi-part message reassembly.

Some NMEA reports do not fit into one 82-character sentence and are spread
over a cycle of consecutive sentences of the same type, each carrying its
position as ``(sequence_number, total_parts)``. GSV is the common case: a
receiver tracking 12 satellites emits three ``GPGSV`` sentences per cycle.

``MultiPartReassembler`` keeps at most one pending cycle per message type and
emits the ordered cycle once its last part arrives. Any discontinuity (gap,
duplicate, changed total, out-of-order arrival) throws the whole pending
cycle away, so a corrupted cycle never holds on to stale fragments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from nmea_device.core.logging_utils import get_module_logger
from .parsers.nmea_types import MessageLike

logger = get_module_logger("Reassembler")


@dataclass(frozen=True, slots=True)
class Standalone:
    """A message that is not part of a multi-part cycle."""

    message: MessageLike


@dataclass(frozen=True, slots=True)
class FragmentPending:
    """A fragment was consumed (stored or dropped); nothing to emit yet."""

    message: MessageLike


@dataclass(frozen=True, slots=True)
class GroupComplete:
    """``message`` completed its cycle; ``parts`` is the cycle in sequence order."""

    message: MessageLike
    parts: tuple[MessageLike, ...]


DispatchEvent = Union[Standalone, FragmentPending, GroupComplete]


@dataclass(slots=True)
class _PendingGroup:
    total_parts: int
    parts: dict[int, MessageLike] = field(default_factory=dict)


class MultiPartReassembler:
    """Per-type cache of incomplete multi-part cycles.

    Only the read loop calls ``ingest``; ``clear`` is called by the device on
    open and close.
    """

    def __init__(self, restart_on_first_part: bool = False):
        """Initialize the reassembler.

        Args:
            restart_on_first_part: When a sequence-1 fragment breaks a pending
                cycle, start a new cycle with it instead of dropping it.
        """
        self._groups: dict[str, _PendingGroup] = {}
        self._restart_on_first_part = restart_on_first_part
        self.completed_groups = 0
        self.discarded_groups = 0
        self.dropped_fragments = 0

    def __len__(self) -> int:
        return len(self._groups)

    @property
    def restart_on_first_part(self) -> bool:
        return self._restart_on_first_part

    def pending_types(self) -> list[str]:
        """Message types with an incomplete cycle."""
        return list(self._groups)

    def pending(self, message_type: str) -> dict[int, MessageLike]:
        """Copy of the stored fragments for ``message_type`` keyed by sequence number."""
        group = self._groups.get(message_type)
        return dict(group.parts) if group else {}

    def clear(self) -> None:
        self._groups.clear()

    def ingest(self, message: MessageLike) -> DispatchEvent:
        """Classify ``message`` and update the pending cycle for its type."""
        facet = getattr(message, "multipart", None)
        if facet is None:
            return Standalone(message)

        message_type = message.message_type
        number = facet.sequence_number
        total = facet.total_parts

        if not 1 <= number <= total:
            if self._groups.pop(message_type, None) is not None:
                self.discarded_groups += 1
            self.dropped_fragments += 1
            logger.debug("Dropped malformed %s fragment %d/%d", message_type, number, total)
            return FragmentPending(message)

        group = self._groups.get(message_type)
        if group is not None:
            if (
                group.total_parts == total
                and (number - 1) in group.parts
                and number not in group.parts
            ):
                group.parts[number] = message
            else:
                self._groups.pop(message_type, None)
                self.discarded_groups += 1
                logger.debug(
                    "Discontinuity in %s cycle (have %s of %d, got %d/%d); cycle discarded",
                    message_type, sorted(group.parts), group.total_parts, number, total,
                )
                if not (self._restart_on_first_part and number == 1):
                    self.dropped_fragments += 1
                    return FragmentPending(message)
                group = self._start_group(message_type, message, total)
        elif number == 1:
            group = self._start_group(message_type, message, total)
        else:
            self.dropped_fragments += 1
            logger.debug("Dropped orphan %s fragment %d/%d", message_type, number, total)
            return FragmentPending(message)

        if len(group.parts) == total:
            self._groups.pop(message_type, None)
            self.completed_groups += 1
            return GroupComplete(message, tuple(group.parts[i] for i in range(1, total + 1)))

        return FragmentPending(message)

    def _start_group(self, message_type: str, message: MessageLike, total: int) -> _PendingGroup:
        group = _PendingGroup(total_parts=total, parts={1: message})
        self._groups[message_type] = group
        return group


__all__ = [
    "DispatchEvent",
    "FragmentPending",
    "GroupComplete",
    "MultiPartReassembler",
    "Standalone",
]

"""Unit tests for the line framer."""

import pytest

from nmea_device.device.framing import LineFramer


GGA = "$GPGGA,123519,4807.038,N,01131.000,E,1,08,0.9,545.4,M,47.0,M,,*47"
RMC = "$GPRMC,123519,A,4807.038,N,01131.000,E,022.4,084.4,230394,003.1,W*6A"
STREAM = f"{GGA}\r\n{RMC}\r\n\r\n$GPGSV,1,1,00*79\n".encode("ascii")


def _feed_chunks(data: bytes, size: int) -> list[str]:
    framer = LineFramer()
    lines = []
    for offset in range(0, len(data), size):
        lines.extend(framer.feed(data[offset:offset + size]))
    return lines


class TestLineFramer:
    """Test line extraction."""

    def test_single_complete_line(self):
        framer = LineFramer()
        assert framer.feed(f"{GGA}\r\n".encode()) == [GGA]
        assert framer.pending == ""

    def test_extracts_every_line_in_one_chunk(self):
        """A chunk carrying several sentences yields all of them, in order."""
        framer = LineFramer()
        lines = framer.feed(STREAM)
        assert lines == [GGA, RMC, "$GPGSV,1,1,00*79"]

    def test_partial_line_is_retained(self):
        framer = LineFramer()
        assert framer.feed(b"$GPGGA,1234") == []
        assert framer.pending == "$GPGGA,1234"
        assert framer.feed(b"56*00\n") == ["$GPGGA,123456*00"]
        assert framer.pending == ""

    def test_empty_and_whitespace_lines_are_skipped(self):
        framer = LineFramer()
        assert framer.feed(b"\n\r\n   \n\t\n") == []

    def test_surrounding_whitespace_trimmed(self):
        framer = LineFramer()
        assert framer.feed(b"  $GPRMC,1*00  \r\n") == ["$GPRMC,1*00"]

    @pytest.mark.parametrize("size", [1, 2, 3, 7, 16, 64, 1024])
    def test_chunk_boundary_independence(self, size):
        """Any chunking of the stream yields the same lines as one big feed."""
        assert _feed_chunks(STREAM, size) == LineFramer().feed(STREAM)

    def test_multibyte_character_split_across_chunks(self):
        data = "$PXXX,café*00\n".encode("utf-8")
        split = data.index(b"\xc3") + 1  # between the two bytes of the e-acute
        framer = LineFramer()
        assert framer.feed(data[:split]) == []
        assert framer.feed(data[split:]) == ["$PXXX,café*00"]

    def test_invalid_utf8_is_replaced(self):
        framer = LineFramer()
        assert framer.feed(b"$GP\xffGGA\n") == ["$GP\ufffdGGA"]

    def test_clear_drops_pending(self):
        framer = LineFramer()
        framer.feed(b"$GPGGA,partial")
        framer.clear()
        assert framer.pending == ""
        assert framer.feed(b"\n") == []

    def test_clear_resets_partial_character(self):
        framer = LineFramer()
        framer.feed(b"\xc3")
        framer.clear()
        assert framer.feed(b"ok\n") == ["ok"]


class TestBufferBound:
    """Test the unterminated-tail bound."""

    def test_runaway_tail_is_discarded(self):
        framer = LineFramer(max_buffer_chars=16)
        assert framer.feed(b"x" * 20) == []
        assert framer.pending == ""
        assert framer.discarded_chars == 20
        assert framer.feed(b"$GPGGA*56\n") == ["$GPGGA*56"]

    def test_complete_lines_before_tail_survive(self):
        framer = LineFramer(max_buffer_chars=8)
        assert framer.feed(b"$A*00\n" + b"y" * 10) == ["$A*00"]
        assert framer.pending == ""

    def test_bound_disabled(self):
        framer = LineFramer(max_buffer_chars=None)
        framer.feed(b"z" * 100_000)
        assert len(framer.pending) == 100_000
